# Import Base class and all models so create_all / Alembic can detect them
from newsflow.db.base_class import Base  # noqa
from newsflow.models.user import User  # noqa
from newsflow.models.interest import Interest  # noqa
from newsflow.models.api_key import ApiKey  # noqa
from newsflow.models.saved_article import SavedArticle  # noqa
from newsflow.models.admin_log import AdminLog  # noqa
