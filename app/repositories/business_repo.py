from app.db.store import PROFILE, DocumentStore, Transaction, collection_path
from app.models.base import utcnow_iso
from app.models.business import BusinessProfile

PROFILE_DOC_ID = "business"


class BusinessRepository:
    """Business profile (settings) storage. One document per account."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_profile(self, account_id: str) -> BusinessProfile:
        """Return the stored profile, or an empty one if settings were never saved."""
        doc = await self.store.get_document(collection_path(account_id, PROFILE), PROFILE_DOC_ID)
        if doc:
            return BusinessProfile(**doc)
        return BusinessProfile()

    async def save_profile(self, account_id: str, profile: BusinessProfile) -> BusinessProfile:
        path = collection_path(account_id, PROFILE)
        fields = profile.model_dump()
        fields["updated_at"] = utcnow_iso()

        async def upsert(transaction: Transaction):
            transaction.set(path, PROFILE_DOC_ID, fields)

        await self.store.run_transaction(upsert)
        return profile
