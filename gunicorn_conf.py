# Gunicorn settings for containers: gunicorn -c gunicorn_conf.py
# The app is served by uvicorn workers; logs go to stdout/stderr.

wsgi_app = "leavewise.main:app"
bind = "0.0.0.0:10000"
worker_class = "uvicorn.workers.UvicornWorker"
workers = 2
threads = 4
# drafting calls are bounded by NOTIFY_TIMEOUT_S, keep a margin above it
timeout = 90

accesslog = "-"
errorlog = "-"
loglevel = "info"
capture_output = True
