from models.owner import ShopOwner, NotificationSettings
from models.user import User
from models.category import Category, shop_categories
from models.shop import Shop, ShopPhoto, ShopView
from models.chat import Conversation, Message, SenderType, MessageType
from models.rating import Rating
