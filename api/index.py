from mangum import Mangum
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wallet.api import create_app
from wallet.config import configure_logging, get_settings

settings = get_settings()
configure_logging(settings.log_level)

app = create_app(settings=settings, root_path="/api")

handler = Mangum(app)
