import logging

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'


#-- configure the application logger once; modules log through logging.getLogger(__name__)
def setup_logger(level: str = "INFO") -> logging.Logger:
    formatter = logging.Formatter(LOG_FORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)

    if not root.handlers:
        root.addHandler(handler)

    return root
