# use in gunicorn as: env/bin/gunicorn mediatree.api:app -c gunicorn.conf.py
from mediatree.config import RefreshPolicy, get_settings

# Workers
# The session tree cache lives in each worker, so an upload or delete would only invalidate one of them
workers = 1 if get_settings().refresh_policy == RefreshPolicy.session else 5
worker_class = 'uvicorn.workers.UvicornWorker'

# Socket
bind = 'localhost:5001'

# Logging
# loglevel = 'debug'
# accesslog = '/tmp/mediatree_access_log'
# errorlog =  '/tmp/mediatree_error_log'
