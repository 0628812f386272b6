"""AWS provider exceptions."""
from typing import Any, Optional

from botocore.exceptions import ClientError

from scopekeeper.infrastructure.exceptions import InfrastructureError


class AWSError(InfrastructureError):
    """Base class for errors raised by AWS calls."""
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, details)
        self.error_code = error_code


class AWSValidationError(AWSError):
    """AWS rejected the request parameters."""
    pass


class AWSEntityNotFoundError(AWSError):
    """The referenced AWS resource does not exist."""
    pass


class AWSRateLimitError(AWSError):
    """Request throttled by AWS."""
    pass


class AWSPermissionError(AWSError):
    """Caller is not authorized for the operation."""
    pass


class AWSConflictError(AWSError):
    """Resource already exists or overlaps another one."""
    pass


class AWSInfrastructureError(AWSError):
    """Any other AWS failure."""
    pass


_VALIDATION_CODES = {'ValidationError', 'InvalidParameterValue', 'InvalidParameter',
                     'InvalidParameterCombination', 'InvalidParameterException',
                     'ClientException', 'MissingParameter'}
_RATE_LIMIT_CODES = {'RequestLimitExceeded', 'Throttling', 'ThrottlingException',
                     'TooManyRequestsException'}
_PERMISSION_CODES = {'UnauthorizedOperation', 'AccessDenied', 'AccessDeniedException',
                     'AuthFailure'}
_CONFLICT_CODES = {'InvalidSubnet.Conflict', 'InvalidSubnet.Range', 'ResourceInUse',
                   'DependencyViolation', 'ConflictingDomainExists'}
_NOT_FOUND_CODES = {'ResourceNotFound', 'ResourceNotFoundException', 'NoSuchHostedZone',
                    'ClusterNotFoundException', 'ServiceNotFoundException',
                    'ServiceNotActiveException'}


def convert_client_error(error: ClientError, operation_name: str = "unknown") -> AWSError:
    """Convert AWS ClientError to a provider exception, keeping the error code."""
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))
    message = f"{operation_name} failed: {error_code} - {error_message}"

    if error_code in _VALIDATION_CODES:
        exc_class = AWSValidationError
    elif error_code in _RATE_LIMIT_CODES:
        exc_class = AWSRateLimitError
    elif error_code in _PERMISSION_CODES:
        exc_class = AWSPermissionError
    elif error_code in _CONFLICT_CODES or error_code.endswith(('.Duplicate', 'AlreadyExists')):
        exc_class = AWSConflictError
    elif error_code in _NOT_FOUND_CODES or error_code.endswith('.NotFound'):
        exc_class = AWSEntityNotFoundError
    else:
        exc_class = AWSInfrastructureError

    converted = exc_class(message, error_code=error_code, details=error.response)
    converted.__cause__ = error
    return converted
