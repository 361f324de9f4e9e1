from assistant.flows.analytics_sql_generator import (
    GenerateAnalyticsSQLInput,
    GenerateAnalyticsSQLOutput,
    analytics_sql_flow,
    generate_analytics_sql,
)
from assistant.flows.parse_application_email import (
    ParseApplicationEmailInput,
    ParseApplicationEmailOutput,
    parse_application_email,
    parse_application_email_flow,
)

__all__ = [
    "GenerateAnalyticsSQLInput",
    "GenerateAnalyticsSQLOutput",
    "analytics_sql_flow",
    "generate_analytics_sql",
    "ParseApplicationEmailInput",
    "ParseApplicationEmailOutput",
    "parse_application_email",
    "parse_application_email_flow",
]
