from typing import Optional

from pydantic import BaseModel


class OnboardingPayload(BaseModel):
    """Flat record POSTed once to the automation webhook."""

    subscriber_id: str
    goal: str
    business_name: str
    industry: str
    use_current_phone: Optional[bool] = None
    phone_number: str
    open_time: str
    close_time: str
    pdf_base64: Optional[str] = None
    pdf_name: Optional[str] = None
    review_platform: str = ""
    review_link: str = ""
