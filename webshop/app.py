# module webshop.app
import logging
from webshop import config
from webshop.app_setup.factory import create_app

logging.basicConfig(level=config.LOG_LEVEL.upper())

app = create_app()
