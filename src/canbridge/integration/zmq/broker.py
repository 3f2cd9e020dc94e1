#!/usr/bin/env python3
"""
ZMQ Bus Broker

Local XSUB <-> XPUB forwarder used as the message bus for ZmqTransport:
- Publishers (CAN simulator, the bridge) connect to the frontend (XSUB)
- Subscribers (the bridge, sensor consumers) connect to the backend (XPUB)

Usage:
    can-bridge-broker
    can-bridge-broker --frontend tcp://*:5555 --backend tcp://*:5556
"""

import argparse
import sys

import zmq

from canbridge.constants import ZmqConstants


class BusBroker:
    """
    Forwards every message from publishers to subscribers.
    """

    def __init__(
        self,
        frontend_url: str = ZmqConstants.DEFAULT_FRONTEND_URL,
        backend_url: str = ZmqConstants.DEFAULT_BACKEND_URL,
        context: zmq.Context | None = None,
    ):
        """
        Initialize broker.

        Args:
            frontend_url: XSUB bind URL (publishers connect here)
            backend_url: XPUB bind URL (subscribers connect here)
            context: Shared ZMQ context (optional)
        """
        self.context = context if context else zmq.Context()
        self.owns_context = context is None

        self.frontend = self.context.socket(zmq.XSUB)
        self.frontend.bind(frontend_url)
        print(f"✓ Frontend (XSUB): {frontend_url}")

        self.backend = self.context.socket(zmq.XPUB)
        self.backend.bind(backend_url)
        print(f"✓ Backend (XPUB): {backend_url}")

    def run(self):
        """Forward messages until interrupted."""
        try:
            zmq.proxy(self.frontend, self.backend)
        except (KeyboardInterrupt, zmq.ContextTerminated):
            pass
        finally:
            self.close()

    def close(self):
        """Close sockets and cleanup resources."""
        print("\n[Broker] Shutting down...")
        self.frontend.close(0)
        self.backend.close(0)
        if self.owns_context and self.context:
            self.context.term()
        print("[Broker] Shutdown complete")


def main():
    """Main entry point for the bus broker."""
    parser = argparse.ArgumentParser(description="ZMQ bus broker for the CAN bridge")
    parser.add_argument(
        "--frontend",
        type=str,
        default=ZmqConstants.DEFAULT_FRONTEND_URL,
        help=f"XSUB bind URL for publishers (default: {ZmqConstants.DEFAULT_FRONTEND_URL})",
    )
    parser.add_argument(
        "--backend",
        type=str,
        default=ZmqConstants.DEFAULT_BACKEND_URL,
        help=f"XPUB bind URL for subscribers (default: {ZmqConstants.DEFAULT_BACKEND_URL})",
    )
    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("CAN Bridge ZMQ Broker")
    print("=" * 60)

    broker = BusBroker(frontend_url=args.frontend, backend_url=args.backend)
    print("Press Ctrl+C to stop")
    broker.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
