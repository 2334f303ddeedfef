from smartbrain import create_app, shutdown
from smartbrain.core.database import connect
from smartbrain.utils.logger import setup_logger

app = create_app()
logger = setup_logger()

if __name__ == '__main__':
    logger.info("Starting SmartBrain backend")
    connect(app)
    try:
        app.run(host='0.0.0.0', port=app.config['PORT'], debug=app.config['DEBUG'])
    finally:
        shutdown(app)
        logger.info("Graceful shutdown completed")
