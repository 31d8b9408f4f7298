from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from .ares import lookup_company
from .exceptions import IntegrationError, SubjectNotFound
from .vat import check_vat_reliability


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def company_lookup(request, ico):
    """Company registry data for an ICO"""
    try:
        return Response(lookup_company(ico))
    except SubjectNotFound as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except IntegrationError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def vat_reliability(request):
    """Unreliable VAT payer check"""
    dic = request.query_params.get('dic', None)
    if not dic:
        return Response({'error': 'Parameter "dic" is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        return Response(check_vat_reliability(dic))
    except IntegrationError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
