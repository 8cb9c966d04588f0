import logging

from app.core.errors import ValidationError
from app.db.store import DocumentStore
from app.models.business import BusinessProfile
from app.repositories.business_repo import BusinessRepository
from app.schemas.business import BusinessProfileResponse, BusinessProfileUpdate
from app.services.tax_service import state_name

logger = logging.getLogger(__name__)


class BusinessService:
    """Seller profile settings."""

    def __init__(self, store: DocumentStore):
        self.business = BusinessRepository(store)

    @staticmethod
    def _to_response(profile: BusinessProfile) -> BusinessProfileResponse:
        return BusinessProfileResponse(
            **profile.model_dump(),
            state_name=state_name(profile.gstin) if profile.gstin else None
        )

    async def get(self, account_id: str) -> BusinessProfileResponse:
        return self._to_response(await self.business.get_profile(account_id))

    async def save(self, account_id: str, profile_in: BusinessProfileUpdate) -> BusinessProfileResponse:
        business_name = profile_in.business_name.strip()
        if not business_name:
            raise ValidationError("Business name is required")

        profile = BusinessProfile(
            business_name=business_name,
            gst_number=profile_in.gst_number or None,
            upi_id=(profile_in.upi_id or "").strip() or None,
            phone=(profile_in.phone or "").strip() or None
        )
        profile = await self.business.save_profile(account_id, profile)
        logger.info("Saved business profile for account %s", account_id)
        return self._to_response(profile)
