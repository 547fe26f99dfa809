"""
Billing errors.

Every error knows the HTTP status and machine-readable code it is reported
with, so routers can raise them and let the application handler render
``to_dict()``. Subclasses set the defaults as class attributes.
"""

from typing import Any, ClassVar


class BillingError(Exception):
    """
    Base class for subscription and billing failures.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable code returned by the API
        status_code: HTTP status the API answers with
        context: Identifiers that help locate the failing record
        recovery_hint: What the caller can do about it
    """

    default_code: ClassVar[str] = "BILLING_ERROR"
    default_status: ClassVar[int] = 400
    default_hint: ClassVar[str | None] = None

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
        recovery_hint: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.status_code = status_code or self.default_status
        # drop unset identifiers so responses only carry what is known
        self.context = {k: v for k, v in (context or {}).items() if v is not None}
        self.recovery_hint = recovery_hint or self.default_hint

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
            "context": self.context,
            "recovery_hint": self.recovery_hint,
        }


class SubscriptionError(BillingError):
    default_code = "SUBSCRIPTION_ERROR"


class SubscriptionNotFoundError(SubscriptionError):
    default_code = "SUBSCRIPTION_NOT_FOUND"
    default_status = 404
    default_hint = "Check the subscription ID; it may belong to another store"

    def __init__(
        self, message: str, subscription_id: str | None = None, user_id: str | None = None
    ):
        super().__init__(
            message, context={"subscription_id": subscription_id, "user_id": user_id}
        )


class SubscriptionStateError(SubscriptionError):
    """Raised when a status change is not in the transition table."""

    default_code = "INVALID_SUBSCRIPTION_STATE"

    def __init__(self, message: str, current_state: str, requested_state: str) -> None:
        super().__init__(
            message,
            context={"current_state": current_state, "requested_state": requested_state},
            recovery_hint=(
                f"A {current_state} subscription cannot become {requested_state}; "
                "fetch it again and pick an allowed status"
            ),
        )


class PlanNotFoundError(SubscriptionError):
    default_code = "PLAN_NOT_FOUND"
    default_status = 404
    default_hint = "List plans to find a valid, active plan ID"

    def __init__(self, message: str, plan_id: str | None = None) -> None:
        super().__init__(message, context={"plan_id": plan_id})


class UserNotFoundError(BillingError):
    default_code = "USER_NOT_FOUND"
    default_status = 404
    default_hint = "Check that the subscriber account exists"

    def __init__(self, message: str, user_id: str | None = None) -> None:
        super().__init__(message, context={"user_id": user_id})


class BillingConfigurationError(BillingError):
    default_code = "BILLING_CONFIG_ERROR"
    default_status = 500
    default_hint = "Fix the BILLING__* settings and restart"

    def __init__(self, message: str, config_key: str | None = None) -> None:
        super().__init__(message, context={"config_key": config_key})


class NotificationError(BillingError):
    """An email could not be rendered or handed to the sender."""

    default_code = "NOTIFICATION_ERROR"
    default_status = 502
    default_hint = "Check the template name and the EMAIL__* settings"

    def __init__(self, message: str, template_name: str | None = None) -> None:
        super().__init__(message, context={"template_name": template_name})
