"""Application entry point."""
import logging
import os
from sim_monitor import config
from sim_monitor.monitor import SolveMonitor


def setup_logging():
    """Set up logging configuration."""
    log_level = logging.DEBUG if config.DEBUG else logging.INFO

    log_dir = config.LOG_DIR
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(f'{log_dir}/sim_monitor.log')
        ]
    )


def main():
    """Main entry point for the application."""
    setup_logging()
    logger = logging.getLogger(__name__)

    logger.info("Initializing SIM monitor")

    try:
        monitor = SolveMonitor(config)
        monitor.run()
    except Exception as e:
        # CorruptStateError lands here and needs an operator
        logger.error("Monitor stopped: %s", e)
        raise


if __name__ == "__main__":
    main()
