import logging
from datetime import datetime
from typing import Optional

from config import ApplicationConfig
from crm_service.domain.entities import OtpPurpose

logger = logging.getLogger(__name__)


def deliver_otp(
    email: str,
    code: str,
    purpose: OtpPurpose,
    expires_at: datetime,
    environment: Optional[str] = None,
) -> None:
    """
    Hand a freshly issued code to the user.

    Email delivery is external; in development the code is written to the
    log so flows can be exercised by hand.
    """
    environment = environment or ApplicationConfig.ENVIRONMENT
    if environment != "development":
        return
    logger.info(
        f"OTP issued: email={email} purpose={purpose.value} code={code} "
        f"expires_at={expires_at.isoformat()}"
    )
