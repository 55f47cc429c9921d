# Import all models so SQLAlchemy can resolve relationships
from newsflow.models.user import User as User
from newsflow.models.interest import Interest as Interest
from newsflow.models.api_key import ApiKey as ApiKey
from newsflow.models.saved_article import SavedArticle as SavedArticle
from newsflow.models.admin_log import AdminLog as AdminLog, AdminAction as AdminAction
