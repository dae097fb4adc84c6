import logging
import math
import uuid
from supabase import AsyncClient
from barber_api.modules.barbers.models import BARBERS_TABLE, BARBER_LIST_COLUMNS
from barber_api.modules.barbers.s3_storage import S3Storage, get_s3_storage
from barber_api.modules.barbers.schemas import (
    BarberCreate, BarberResponse, BarberListItem, BarberListResponse, MessageResponse
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class BarberService:
    def __init__(self, supabase: AsyncClient, storage: Optional[S3Storage] = None):
        self.supabase = supabase
        self._storage = storage

    @property
    def storage(self) -> S3Storage:
        if self._storage is None:
            self._storage = get_s3_storage()
        return self._storage

    @staticmethod
    def _to_response(row: Dict[str, Any]) -> BarberResponse:
        return BarberResponse(
            id=str(row["id"]),
            title=row["title"],
            caption=row["caption"],
            rating=row["rating"],
            image=row["image"],
            user=str(row["user_id"]),
            created_at=row["created_at"],
        )

    async def create_barber(self, barber_data: BarberCreate, user_id: str) -> BarberResponse:
        """Upload the image, then store a barber owned by user_id"""
        fields = (barber_data.title, barber_data.caption, barber_data.rating, barber_data.image)
        if any(not value or (isinstance(value, str) and not value.strip()) for value in fields):
            raise HTTPException(status_code=400, detail="Please fill in all fields")

        try:
            image_url = await self.storage.upload_image(barber_data.image)

            result = await self.supabase.table(BARBERS_TABLE).insert({
                "title": barber_data.title,
                "caption": barber_data.caption,
                "rating": barber_data.rating,
                "image": image_url,
                "user_id": user_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create barber")

            barber = self._to_response(result.data[0])
            logger.info("Barber %s created by user %s", barber.id, user_id)
            return barber
        except HTTPException:
            raise
        except Exception as e:
            logger.exception("Error creating barber: %s", e)
            raise HTTPException(status_code=500, detail="Failed to create barber")

    async def list_barbers(self, page: int = 1, limit: int = 5) -> BarberListResponse:
        """Newest-first page of barbers from every user, owners expanded"""
        offset = (page - 1) * limit
        try:
            count_result = await self.supabase.table(BARBERS_TABLE)\
                .select("id", count="exact", head=True)\
                .execute()
            total = count_result.count or 0

            rows: List[Dict[str, Any]] = []
            if offset < total:
                result = await self.supabase.table(BARBERS_TABLE)\
                    .select(BARBER_LIST_COLUMNS)\
                    .order("created_at", desc=True)\
                    .limit(limit)\
                    .offset(offset)\
                    .execute()
                rows = result.data or []

            return BarberListResponse(
                barbers=[BarberListItem(**row) for row in rows],
                current_page=page,
                total_barbers=total,
                total_pages=math.ceil(total / limit),
            )
        except Exception as e:
            logger.exception("Error fetching barbers: %s", e)
            raise HTTPException(status_code=500, detail="Internal server error")

    async def list_user_barbers(self, user_id: str) -> List[BarberResponse]:
        """All barbers owned by user_id, newest first"""
        try:
            result = await self.supabase.table(BARBERS_TABLE)\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [self._to_response(row) for row in result.data or []]
        except Exception as e:
            logger.exception("Error fetching barbers for user %s: %s", user_id, e)
            raise HTTPException(status_code=500, detail="Internal server error")

    async def delete_barber(self, barber_id: str, user_id: str) -> MessageResponse:
        """Delete a barber owned by user_id, along with its hosted image when possible"""
        try:
            uuid.UUID(barber_id)
        except ValueError:
            raise HTTPException(status_code=404, detail="Barber not found")

        try:
            result = await self.supabase.table(BARBERS_TABLE)\
                .select("*")\
                .eq("id", barber_id)\
                .maybe_single()\
                .execute()
            if result is None or not result.data:
                raise HTTPException(status_code=404, detail="Barber not found")

            barber = result.data
            if str(barber["user_id"]) != str(user_id):
                raise HTTPException(status_code=401, detail="You can't delete this barber")

            image = barber.get("image")
            if image:
                try:
                    await self.storage.delete_image(image)
                except Exception as delete_error:
                    logger.warning("Error deleting image for barber %s: %s", barber_id, delete_error)

            await self.supabase.table(BARBERS_TABLE)\
                .delete()\
                .eq("id", barber_id)\
                .execute()
            logger.info("Barber %s deleted by user %s", barber_id, user_id)
            return MessageResponse(message="Barber deleted successfully")
        except HTTPException:
            raise
        except Exception as e:
            logger.exception("Error deleting barber %s: %s", barber_id, e)
            raise HTTPException(status_code=500, detail="Internal server error")
