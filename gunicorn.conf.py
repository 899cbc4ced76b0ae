# Gunicorn configuration to run a global warmup once in the master process
from config import Config
from utils.startup import run_master_global_warmup

# You can tune these worker settings for your deployment
bind = '0.0.0.0:5001'
workers = int(Config.GUNICORN_WORKERS)
timeout = int(Config.GUNICORN_TIMEOUT)
wsgi_app = 'app:create_app()'


def on_starting(server):
    """Runs once in the Gunicorn master process before workers are forked."""
    server.log.info('[gunicorn] on_starting: ensuring MongoDB indexes')
    if Config.ENSURE_INDEXES:
        run_master_global_warmup(mongo_uri=Config.MONGO_URI)


def post_fork(server, worker):
    server.log.info(f'[gunicorn] Worker forked: pid={worker.pid}')
