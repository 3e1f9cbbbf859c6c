from app.models.base import Base  # noqa: F401

from app.models.user import User  # noqa: F401
from app.models.api_key import ApiKey  # noqa: F401
from app.models.tag import Tag  # noqa: F401
from app.models.image import Image  # noqa: F401
from app.models.office import Office, office_tag  # noqa: F401
from app.models.reservation import Reservation  # noqa: F401
from app.models.notification import Notification  # noqa: F401
