"""
Extracts job application details from the text of a forwarded email.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from assistant.prompt import PromptFlow


class ParseApplicationEmailInput(BaseModel):
    raw_text: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("raw_text", "rawText"),
        description="The raw text content of the forwarded email.",
    )


class ParseApplicationEmailOutput(BaseModel):
    company: str = ""
    title: str = ""
    applied_at: str = Field(
        "",
        validation_alias=AliasChoices("applied_at", "appliedAt"),
        description="Date the application was submitted (ISO format).",
    )
    url: Optional[str] = None
    application_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("application_id", "applicationId"),
    )

    @field_validator("company", "title", "applied_at", mode="before")
    @classmethod
    def blank_if_missing(cls, v):
        return str(v or "").strip()

    @field_validator("url", "application_id", mode="before")
    @classmethod
    def none_if_blank(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


PARSE_EMAIL_TEMPLATE = """You are an expert at extracting job application details from email text.

Your goal is to extract the company name, job title, application date, and application URL from the provided email text.
If a piece of information isn't found, leave it blank, do not guess.

Return the information as a JSON object with the following keys:
- company (string): The name of the company.
- title (string): The job title.
- appliedAt (string): The date when the application was submitted (ISO format).
- url (string, optional): The URL of the job application, if available.
- applicationId (string, optional): The unique identifier of the application, if available.

Here is the email text:
{raw_text}
"""

parse_application_email_flow = PromptFlow(
    name="parse_application_email",
    input_model=ParseApplicationEmailInput,
    output_model=ParseApplicationEmailOutput,
    template=PARSE_EMAIL_TEMPLATE,
)


async def parse_application_email(payload) -> ParseApplicationEmailOutput:
    return await parse_application_email_flow.run(payload)
