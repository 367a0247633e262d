import logging
import sys

from dotenv import load_dotenv
from flask import Flask

from flask_google_oauth_gateway import Config, setup_gateway_routes

# Load environment variables from .env file (for local development)
load_dotenv()

app = Flask(__name__)

# Cloud Run captures logs from stdout/stderr
if not app.debug:
    gunicorn_logger = logging.getLogger('gunicorn.error')
    app.logger.handlers = gunicorn_logger.handlers
    app.logger.setLevel(gunicorn_logger.level)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout,
        force=True
    )

for handler in app.logger.handlers:
    handler.setStream(sys.stdout)

app.logger.info("Flask app starting up...")

# Resolves GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, REDIRECT_URLS,
# RESTRICT_TO_IPS and RESTRICT_TO_DOMAINS
config = Config(app)

# POST /api/generateauthurl, /api/generatetoken, /api/refreshtoken
# Cloud Run puts one proxy in front of the app
setup_gateway_routes(app, url_prefix='/api', trusted_proxy_hops=1)


@app.route('/')
def home():
    """Public home page."""
    return (
        "<h1>Google Login Gateway</h1>"
        "<p>POST to /api/generateauthurl, /api/generatetoken or /api/refreshtoken.</p>"
    )


if __name__ == '__main__':
    app.run(debug=True, port=8080)
