#!/usr/bin/env python3
"""
Ads service for pharmacy banners shown on client dashboards
"""

import logging
from typing import List, Dict, Any, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from .base_service import BaseService
from ..models.pharmacy_ads import PharmacyAds
from ..models.pharmacy import Pharmacy
from lib.whatsapp_utils import DEFAULT_AD_MESSAGE, build_whatsapp_link

logger = logging.getLogger(__name__)

def banner_object_path(pharmacy_id: str, filename: str, now: Optional[datetime] = None) -> str:
    """Storage key: <pharmacy_id>/<epoch ms>_<filename>"""
    millis = int((now or datetime.now()).timestamp() * 1000)
    return f"{pharmacy_id}/{millis}_{filename}"

class AdsService(BaseService):
    """Service for handling pharmacy ads"""

    def __init__(self, db_session: Session):
        super().__init__(db_session)

    def get_ad(self, ad_id: str) -> PharmacyAds:
        return self.get_or_404(PharmacyAds, ad_id, "Ad")

    def list_ads(self, pharmacy_id: str) -> List[PharmacyAds]:
        """Manager view: active first, then display order, newest first"""
        return (self.db.query(PharmacyAds)
                .filter(PharmacyAds.pharmacy_id == pharmacy_id)
                .order_by(PharmacyAds.is_active.desc(),
                          PharmacyAds.display_order.asc(),
                          PharmacyAds.created_at.desc())
                .all())

    def get_banners(self, pharmacy_id: str) -> List[Dict[str, Any]]:
        """Active ads with a WhatsApp link, falling back to the pharmacy phone"""
        pharmacy = self.db.get(Pharmacy, pharmacy_id)
        fallback_phone = pharmacy.phone if pharmacy else None
        ads = (self.db.query(PharmacyAds)
               .filter(PharmacyAds.pharmacy_id == pharmacy_id,
                       PharmacyAds.is_active.is_(True))
               .order_by(PharmacyAds.display_order.asc(), PharmacyAds.created_at.desc())
               .all())
        banners = []
        for ad in ads:
            item = ad.to_dict()
            item["whatsapp_link"] = build_whatsapp_link(ad.whatsapp_phone or fallback_phone,
                                                        ad.whatsapp_message or DEFAULT_AD_MESSAGE)
            banners.append(item)
        return banners

    def create_ad(self, pharmacy_id: str, image_url: str, whatsapp_phone: Optional[str] = None,
                  whatsapp_message: Optional[str] = None) -> PharmacyAds:
        ad = PharmacyAds(
            pharmacy_id=pharmacy_id,
            image_url=image_url,
            whatsapp_phone=(whatsapp_phone or "").strip() or None,
            whatsapp_message=(whatsapp_message or "").strip() or None,
            is_active=True,
        )
        self.commit(ad)
        logger.info(f"🖼️ Ad {ad.id} created for pharmacy {pharmacy_id}")
        return ad

    def toggle_active(self, ad: PharmacyAds) -> PharmacyAds:
        ad.is_active = not ad.is_active
        return self.commit(ad)

    def delete_ad(self, ad: PharmacyAds) -> None:
        ad_id = ad.id
        self.delete(ad)
        logger.info(f"🗑️ Ad {ad_id} deleted")
