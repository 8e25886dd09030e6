# Import every ORM model so Base.metadata is complete (create_all, scripts).
from app.modules.assets.models import Asset, AssetGroup  # noqa: F401
from app.modules.families.models import Family  # noqa: F401
from app.modules.notifications.models import Notification  # noqa: F401
