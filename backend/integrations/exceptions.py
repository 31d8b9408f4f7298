class IntegrationError(Exception):
    """A public registry answered with an error or could not be reached"""


class SubjectNotFound(IntegrationError):
    """The registry has no record for the requested identifier"""
