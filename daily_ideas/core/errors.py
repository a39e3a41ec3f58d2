"""
Business-rule rejections raised by the data layer.

These are never absorbed by the failover logic: a rejected invite code is a
real answer from the backend, not a connectivity problem.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInviteCodeError(DomainError):
    def __init__(self, message: str = "Invalid invite code"):
        super().__init__(message)


class AlreadyMemberError(DomainError):
    status_code = 409

    def __init__(self, message: str = "You are already a member of this group"):
        super().__init__(message)


class DefaultCategoryDeletionError(DomainError):
    def __init__(self, message: str = "The default category cannot be deleted"):
        super().__init__(message)


class OwnerMembershipError(DomainError):
    pass
