"""
Creative Boost credit arithmetic

Outputs are priced in credits: every output type has a base credit value,
express pieces cost the configured multiple (1.5x) of it. A client month
compares the used credits with its allowance and turns them into money.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal

from django.conf import settings

ZERO = Decimal('0')


@dataclass
class OutputCredits:
    normal_credits: Decimal
    express_credits: Decimal
    total_credits: Decimal


@dataclass
class ClientMonthSummary:
    client_month_id: int
    client_id: int
    client_name: str
    client_brand: str
    year: int
    month: int
    min_credits: Decimal
    max_credits: Decimal
    used_credits: Decimal
    normal_credits: Decimal
    express_credits: Decimal
    remaining_credits: Decimal
    overage_credits: Decimal
    usage_percent: Decimal
    price_per_credit: Decimal
    estimated_invoice: Decimal
    package_amount: Decimal
    invoice_amount: Decimal
    status: str
    colleague_id: int = None
    engagement_id: int = None
    engagement_service_id: int = None
    item_count: int = 0

    def as_dict(self):
        return asdict(self)


def express_multiplier():
    return Decimal(str(getattr(settings, 'CREATIVE_BOOST_EXPRESS_MULTIPLIER', '1.5')))


def calculate_output_credits(output_type, normal_count, express_count):
    """Credits for ``normal_count`` normal and ``express_count`` express pieces.

    A missing output type is worth 0 credits.
    """
    base = output_type.base_credits if output_type is not None else ZERO
    normal_credits = Decimal(normal_count or 0) * base
    express_credits = Decimal(express_count or 0) * base * express_multiplier()
    return OutputCredits(
        normal_credits=normal_credits,
        express_credits=express_credits,
        total_credits=normal_credits + express_credits,
    )


def output_row_credits(output):
    return calculate_output_credits(output.output_type, output.normal_count, output.express_count)


def build_summary(client_month, outputs):
    """Summarize a client month from its output rows (already loaded)"""
    normal = ZERO
    express = ZERO
    for output in outputs:
        credits = output_row_credits(output)
        normal += credits.normal_credits
        express += credits.express_credits

    used = normal + express
    max_credits = client_month.max_credits or ZERO
    price = client_month.price_per_credit or ZERO
    package_amount = max_credits * price
    if max_credits > 0:
        usage_percent = (used / max_credits * 100).quantize(Decimal('0.01'))
    else:
        usage_percent = ZERO
    client = client_month.client

    return ClientMonthSummary(
        client_month_id=client_month.pk,
        client_id=client_month.client_id,
        client_name=client.name,
        client_brand=client.brand_name or client.name,
        year=client_month.year,
        month=client_month.month,
        min_credits=client_month.min_credits,
        max_credits=max_credits,
        used_credits=used,
        normal_credits=normal,
        express_credits=express,
        remaining_credits=max_credits - used,
        overage_credits=max(ZERO, used - max_credits),
        usage_percent=usage_percent,
        price_per_credit=price,
        estimated_invoice=used * price,
        package_amount=package_amount,
        invoice_amount=client_month.invoice_amount if client_month.invoice_amount is not None else package_amount,
        status=client_month.status,
        colleague_id=client_month.colleague_id,
        engagement_id=client_month.engagement_id,
        engagement_service_id=client_month.engagement_service_id,
        item_count=len(outputs),
    )
