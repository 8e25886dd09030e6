import uuid
from sqlalchemy import ColumnElement, or_
from app.core.sorting import resolve_order
from app.modules.assets.models import Asset
from app.modules.assets.schemas import AssetFilter, AssetSortField

SORT_COLUMNS = {
    AssetSortField.NAME: Asset.name,
    AssetSortField.FILE_NAME: Asset.file_name,
    AssetSortField.SIZE: Asset.size,
    AssetSortField.CREATED_AT: Asset.created_at,
    AssetSortField.UPDATED_AT: Asset.updated_at,
}

def build_asset_conditions(user_id: uuid.UUID, f: AssetFilter) -> list[ColumnElement[bool]]:
    cond: list[ColumnElement[bool]] = [Asset.user_id == user_id]

    # an explicit group wins; has_group only applies when no group is named
    if f.asset_group_id is not None:
        cond.append(Asset.asset_group_id == f.asset_group_id)
    elif f.has_group is True:
        cond.append(Asset.asset_group_id.is_not(None))
    elif f.has_group is False:
        cond.append(Asset.asset_group_id.is_(None))

    if f.search:
        cond.append(or_(
            Asset.name.icontains(f.search, autoescape=True),
            Asset.file_name.icontains(f.search, autoescape=True),
        ))
    if f.mime_type:
        cond.append(Asset.mime_type.icontains(f.mime_type, autoescape=True))

    if f.min_size is not None:
        cond.append(Asset.size >= f.min_size)
    if f.max_size is not None:
        cond.append(Asset.size <= f.max_size)

    if f.created_after is not None:
        cond.append(Asset.created_at >= f.created_after)
    if f.created_before is not None:
        cond.append(Asset.created_at <= f.created_before)
    return cond

def resolve_asset_order(f: AssetFilter) -> list[ColumnElement]:
    primary = resolve_order(
        SORT_COLUMNS, Asset.created_at,
        sort_by=f.sort_by, sort_order=f.sort_order, date_filter=f.date_filter,
    )
    # id keeps pages stable when the primary key of the sort ties
    return [primary, Asset.id.asc()]
