import sys
import os
from mangum import Mangum

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from settleup.api import app

handler = Mangum(app, api_gateway_base_path="/api")
