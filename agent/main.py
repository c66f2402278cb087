import logging
import os
import uuid

from logger_config import configure_console_logging, setup_logger

from .service import create_agent_app


def main():
    configure_console_logging(os.getenv("SAG_LOG_LEVEL", "INFO"))
    _, log_path = setup_logger(
        str(uuid.uuid4()),
        logs_dir=os.getenv("SAG_LOGS_DIR", "logs"),
        capture_all=True,
    )
    logging.getLogger(__name__).info("Session log: %s", log_path)

    app = create_agent_app()
    port = int(os.getenv("SAG_AGENT_PORT", "5051"))
    host = os.getenv("SAG_AGENT_HOST", "127.0.0.1")
    print(f"StudyAbroad CRM Local Agent listening on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
