# eventboard/repositories/publication_repository.py
import uuid
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from eventboard.core.schemas.publication import PublicationCreate
from eventboard.models.media import MediaAsset, PublicationMedia
from eventboard.models.publication import Publication
from eventboard.models.user import liked_publications
from eventboard.repositories.interfaces import PublicationRepositoryInterface


def _with_relations(stmt):
    return stmt.options(
        selectinload(Publication.owner),
        selectinload(Publication.media),
    )


def _media_rows(assets: List[MediaAsset], start: int) -> List[PublicationMedia]:
    return [
        PublicationMedia(
            public_id=asset.public_id,
            url=asset.url,
            kind=asset.kind.value,
            position=start + offset,
        )
        for offset, asset in enumerate(assets)
    ]


class PublicationRepository(PublicationRepositoryInterface):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, publication_id: uuid.UUID) -> Optional[Publication]:
        """Fetch a publication with its owner and media"""
        stmt = _with_relations(
            select(Publication).where(Publication.id == publication_id)
        ).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, category: Optional[str] = None) -> List[Publication]:
        stmt = _with_relations(select(Publication))
        if category:
            stmt = stmt.where(Publication.category == category)
        stmt = stmt.order_by(Publication.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: uuid.UUID) -> List[Publication]:
        stmt = _with_relations(
            select(Publication).where(Publication.owner_id == owner_id)
        ).order_by(Publication.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_ids(self, publication_ids: Iterable[uuid.UUID]) -> List[Publication]:
        ids = list(publication_ids)
        if not ids:
            return []
        stmt = _with_relations(
            select(Publication).where(Publication.id.in_(ids))
        ).order_by(Publication.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self, owner_id: uuid.UUID, data: PublicationCreate, assets: List[MediaAsset]
    ) -> Publication:
        """Persist a publication together with its uploaded media"""
        publication = Publication(
            owner_id=owner_id,
            title=data.title,
            description=data.description,
            latitude=data.location.lat,
            longitude=data.location.long,
            category=data.category.value,
            start_date=data.start_date,
            end_date=data.end_date,
            media=_media_rows(assets, start=0),
        )
        self.session.add(publication)
        await self.session.commit()
        # Re-read to pick up server defaults and the owner
        return await self.get_by_id(publication.id)

    async def update(
        self, publication: Publication, changes: Dict, new_assets: List[MediaAsset]
    ) -> Publication:
        changes = dict(changes)
        location = changes.pop("location", None)
        if location is not None:
            publication.latitude = location["lat"]
            publication.longitude = location["long"]
        if "category" in changes:
            changes["category"] = getattr(changes["category"], "value", changes["category"])
        for field, value in changes.items():
            setattr(publication, field, value)

        if new_assets:
            start = max((m.position for m in publication.media), default=-1) + 1
            publication.media.extend(_media_rows(new_assets, start=start))

        await self.session.commit()
        return await self.get_by_id(publication.id)

    async def remove_media(self, publication: Publication, entry: PublicationMedia) -> Publication:
        publication.media.remove(entry)
        await self.session.commit()
        return await self.get_by_id(publication.id)

    async def delete(self, publication: Publication) -> None:
        await self.session.execute(
            delete(liked_publications).where(
                liked_publications.c.publication_id == publication.id
            )
        )
        await self.session.delete(publication)
        await self.session.commit()

    async def count_likes(self, publication_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, int]:
        ids = list(publication_ids)
        if not ids:
            return {}
        stmt = (
            select(liked_publications.c.publication_id, func.count())
            .where(liked_publications.c.publication_id.in_(ids))
            .group_by(liked_publications.c.publication_id)
        )
        result = await self.session.execute(stmt)
        return {publication_id: count for publication_id, count in result.all()}
