"""
Server starter for the Feedback API.
Detects the local IP, picks a free port and serves the ASGI app with uvicorn.
"""

import os
import sys
import socket
import logging

logger = logging.getLogger(__name__)

PORTS_TO_TRY = [8000, 5000, 8080, 3000, 5001]


def get_local_ip():
    """Get the local IP address of the machine."""
    try:
        # Create a socket to get the local IP
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        local_ip = s.getsockname()[0]
        s.close()
        return local_ip
    except OSError as e:
        logger.error(f"Error getting local IP: {e}")
        return "127.0.0.1"


def check_port_available(host, port):
    """Check if a port is available."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host, port))
        return True
    except OSError:
        return False
    finally:
        sock.close()


def pick_port(host, ports=None):
    """First free port from `ports` (PORT env var first when set), or None."""
    candidates = list(ports or PORTS_TO_TRY)
    if os.environ.get('PORT'):
        candidates.insert(0, int(os.environ['PORT']))
    for port in candidates:
        if check_port_available(host, port):
            logger.info(f"Port {port} is available")
            return port
        logger.warning(f"Port {port} is already in use")
    return None


def start_server():
    """Start the API server with automatic configuration."""
    from app import asgi_app
    import uvicorn

    logger.info("=" * 60)
    logger.info("Feedback API - Starting Server")
    logger.info("=" * 60)

    host_ip = get_local_ip()
    logger.info(f"Detected Local IP: {host_ip}")

    selected_port = pick_port(host_ip)
    if not selected_port:
        logger.error("No available ports found. Please close other applications.")
        sys.exit(1)

    logger.info("Server will be accessible at:")
    logger.info(f"  Local:   http://localhost:{selected_port}/api/get-options")
    logger.info(f"  Network: http://{host_ip}:{selected_port}/api/get-options")
    logger.info("Press Ctrl+C to stop the server")

    try:
        uvicorn.run(asgi_app, host=host_ip, port=selected_port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    start_server()
