from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from sqlalchemy import text


DEFAULT_PLANS = (
    {
        "name": "Basic Monthly",
        "type": "basic",
        "billing_cycle": "monthly",
        "price": Decimal("199"),
        "features": ["HD streaming", "Watch on 1 device", "Ad-free"],
        "video_quality": "720p",
        "simultaneous_streams": 1,
        "download_limit": 0,
    },
    {
        "name": "Basic Yearly",
        "type": "basic",
        "billing_cycle": "yearly",
        "price": Decimal("1999"),
        "features": ["HD streaming", "Watch on 1 device", "Ad-free", "2 months free"],
        "video_quality": "720p",
        "simultaneous_streams": 1,
        "download_limit": 0,
    },
    {
        "name": "Advance Monthly",
        "type": "advance",
        "billing_cycle": "monthly",
        "price": Decimal("499"),
        "features": ["4K + HDR streaming", "Watch on 4 devices", "Ad-free", "Downloads"],
        "video_quality": "4K",
        "simultaneous_streams": 4,
        "download_limit": 25,
    },
    {
        "name": "Advance Yearly",
        "type": "advance",
        "billing_cycle": "yearly",
        "price": Decimal("4999"),
        "features": ["4K + HDR streaming", "Watch on 4 devices", "Ad-free", "Downloads", "2 months free"],
        "video_quality": "4K",
        "simultaneous_streams": 4,
        "download_limit": 25,
    },
)


def seed_plans(engine, *, currency: str = "INR") -> None:
    with engine.begin() as conn:
        for plan in DEFAULT_PLANS:
            conn.execute(
                text(
                    """
                    INSERT INTO public.subscription_plans (
                        id, name, type, billing_cycle, price, currency, features,
                        video_quality, simultaneous_streams, download_limit, is_active
                    ) VALUES (
                        :id, :name, :type, :billing_cycle, :price, :currency, :features,
                        :video_quality, :simultaneous_streams, :download_limit, true
                    )
                    ON CONFLICT (name) DO UPDATE
                    SET type = EXCLUDED.type,
                        billing_cycle = EXCLUDED.billing_cycle,
                        price = EXCLUDED.price,
                        currency = EXCLUDED.currency,
                        features = EXCLUDED.features,
                        video_quality = EXCLUDED.video_quality,
                        simultaneous_streams = EXCLUDED.simultaneous_streams,
                        download_limit = EXCLUDED.download_limit,
                        is_active = EXCLUDED.is_active
                    """
                ),
                {"id": str(uuid4()), "currency": currency, **plan},
            )


if __name__ == "__main__":
    from streamflix.infrastructure.db.engine import create_schema, get_engine
    from streamflix.shared.config import get_settings

    settings = get_settings()
    db_engine = get_engine(settings.postgres_dsn)
    create_schema(db_engine)
    seed_plans(db_engine, currency=settings.billing_currency)
