"""
Generates the SQL behind the dashboard charts for a given table layout.

Field names default to the tracker's own schema. On the wire, both input and
output use camelCase keys; snake_case is accepted on input as well.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from assistant.prompt import PromptFlow
from jobtrack.config import settings


class GenerateAnalyticsSQLInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    table_name: str = "applications"
    user_id_field: str = "user_id"
    source_name_field: str = "source_name"
    status_field: str = "status"
    applied_at_field: str = "applied_at"
    first_response_event_name: str = Field(default_factory=lambda: settings.first_response_event_name)
    application_event_table: str = "application_events"
    application_id_field: str = "application_id"
    occurred_at_field: str = "occurred_at"
    event_type_field: str = "type"


class GenerateAnalyticsSQLOutput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    applications_by_source: str
    funnel_counts: str
    avg_time_to_first_response: str
    applications_per_week: str


ANALYTICS_SQL_TEMPLATE = """You are an expert SQL query generator specializing in creating analytics queries for a job application tracker.

Given the following table and field names, generate SQL queries for the following metrics:

Table Name: {table_name}
User ID Field: {user_id_field}
Source Name Field: {source_name_field}
Status Field: {status_field}
Applied At Field: {applied_at_field}
Application Event Table: {application_event_table}
Application ID Field: {application_id_field}
Occurred At Field: {occurred_at_field}
Event Type Field: {event_type_field}
First Response Event Name: {first_response_event_name}

Queries:
1. Applications by source:
2. Funnel counts (applied, viewed, interview, offer):
3. Average time to first response:
4. Applications per week:

Return the SQL queries in a JSON format like this:
{{
  "applicationsBySource": "SQL QUERY",
  "funnelCounts": "SQL QUERY",
  "avgTimeToFirstResponse": "SQL QUERY",
  "applicationsPerWeek": "SQL QUERY"
}}
"""

analytics_sql_flow = PromptFlow(
    name="analytics_sql_generator",
    input_model=GenerateAnalyticsSQLInput,
    output_model=GenerateAnalyticsSQLOutput,
    template=ANALYTICS_SQL_TEMPLATE,
    system_prompt="You write correct, portable SQL. Return VALID JSON only - no markdown, no comments.",
)


async def generate_analytics_sql(payload) -> GenerateAnalyticsSQLOutput:
    return await analytics_sql_flow.run(payload)
