"""Permissions and the group tags that bundle them."""

from enum import StrEnum


class Permission(StrEnum):
    """Fine-grained operation a dashboard user may perform."""

    PAYMENT_READ = "payment:read"
    PAYMENT_WRITE = "payment:write"
    REFUND_READ = "refund:read"
    REFUND_WRITE = "refund:write"
    DISPUTE_READ = "dispute:read"
    DISPUTE_WRITE = "dispute:write"
    CUSTOMER_READ = "customer:read"
    MANDATE_READ = "mandate:read"
    MANDATE_WRITE = "mandate:write"

    CONNECTOR_READ = "connector:read"
    CONNECTOR_WRITE = "connector:write"

    ROUTING_READ = "routing:read"
    ROUTING_WRITE = "routing:write"
    SURCHARGE_READ = "surcharge:read"
    SURCHARGE_WRITE = "surcharge:write"

    ANALYTICS_READ = "analytics:read"

    USERS_READ = "users:read"
    USERS_WRITE = "users:write"

    MERCHANT_ACCOUNT_READ = "merchant_account:read"
    MERCHANT_ACCOUNT_WRITE = "merchant_account:write"
    API_KEY_READ = "api_key:read"
    API_KEY_WRITE = "api_key:write"
    WEBHOOK_EVENT_READ = "webhook_event:read"
    WEBHOOK_EVENT_WRITE = "webhook_event:write"

    ORGANIZATION_ACCOUNT_WRITE = "organization_account:write"


class PermissionGroup(StrEnum):
    """Group tag assignable to a role. Values are the wire names."""

    OPERATIONS_VIEW = "operations-view"
    OPERATIONS_MANAGE = "operations-manage"
    CONNECTORS_VIEW = "connectors-view"
    CONNECTORS_MANAGE = "connectors-manage"
    WORKFLOWS_VIEW = "workflows-view"
    WORKFLOWS_MANAGE = "workflows-manage"
    ANALYTICS_VIEW = "analytics-view"
    USERS_READ = "users-read"
    USERS_WRITE = "users-write"
    MERCHANT_DETAILS_VIEW = "merchant-details-view"
    MERCHANT_DETAILS_MANAGE = "merchant-details-manage"
    ORGANIZATION_MANAGE = "organization-manage"


class ParentGroup(StrEnum):
    """Dashboard section a permission group belongs to."""

    OPERATIONS = "operations"
    CONNECTORS = "connectors"
    WORKFLOWS = "workflows"
    ANALYTICS = "analytics"
    USERS = "users"
    MERCHANT = "merchant"
    ORGANIZATION = "organization"
