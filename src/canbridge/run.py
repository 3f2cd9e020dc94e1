#!/usr/bin/env python3
"""
CAN Bridge Server

Long-running process that:
1. Connects to the pub/sub broker (MQTT or the local ZMQ bus)
2. Subscribes to sim/# and can/messages
3. Decodes CAN frames and republishes normalized sensor results
4. Redirects other simulation topics to the moto/ namespace

Usage:
    # Start with project root config.yaml
    can-bridge

    # Custom broker
    can-bridge --host 127.0.0.1 --port 1883

    # Local ZMQ bus (start can-bridge-broker first)
    can-bridge --transport zmq --verbose

Architecture:
    Sensor / Simulator        CAN Bridge               Consumers
    ┌──────────────┐       ┌──────────────┐        ┌──────────────┐
    │ can/messages │──────►│ Decode       │───────►│ sensor/...   │
    │ sim/...      │ bus   │ Route        │ bus    │ simsensor/...│
    └──────────────┘       └──────────────┘        │ moto/...     │
                                                   └──────────────┘
"""

import argparse
import sys
import signal
import time

from canbridge.constants import BridgeConstants
from canbridge.core.config import Config, ConfigManager
from canbridge.core.interfaces import Transport
from canbridge.errors import TransportError
from canbridge.routing import Dispatcher
from canbridge.utils.terminal import TerminalDisplay, format_stats


def create_transport(config: Config) -> Transport:
    """
    Build the transport selected in config.transport.kind.

    Raises:
        ValueError: unknown transport kind
    """
    kind = config.transport.kind
    if kind == "mqtt":
        from canbridge.integration.mqtt import MqttTransport

        return MqttTransport(
            host=config.mqtt.host,
            port=config.mqtt.port,
            client_id=config.transport.client_id,
            keepalive=config.mqtt.keepalive,
            clean_session=config.mqtt.clean_session,
        )
    if kind == "zmq":
        from canbridge.integration.zmq import ZmqTransport

        return ZmqTransport(sub_url=config.zmq.sub_url, pub_url=config.zmq.pub_url)

    raise ValueError(f"Unknown transport: {kind!r} (expected 'mqtt' or 'zmq')")


class BridgeServer:
    """
    Wires a transport to the dispatcher and keeps the process alive.
    """

    def __init__(self, config: Config, transport: Transport, terminal: TerminalDisplay | None = None):
        """
        Initialize bridge server.

        Args:
            config: System configuration
            transport: Connected-on-start pub/sub transport
            terminal: Terminal display for the status footer (optional)
        """
        print("\n" + "=" * 60)
        print("CAN Bridge")
        print("=" * 60)

        self.config = config
        self.transport = transport
        self.terminal = terminal if terminal else TerminalDisplay(enable_footer=False)

        self.dispatcher = Dispatcher(
            transport,
            route_table=config.routes,
            qos=config.mqtt.qos,
            retain=config.mqtt.retain,
            verbose=config.bridge.verbose,
        )
        print(f"✓ Dispatcher ready ({len(self.dispatcher.resolver.route_table)} arbitration routes)")
        for arbitration_id, topic in sorted(self.dispatcher.resolver.route_table.items()):
            print(f"  0x{arbitration_id:X} -> {topic}")

        self.transport.set_handler(self.dispatcher.dispatch)
        self.transport.subscribe(config.topics.subscriptions, qos=config.mqtt.qos)

        self.running = False
        self.last_stats_time = time.time()

    def start(self):
        """Connect the transport."""
        print(f"\nConnecting ({self.config.transport.kind})...")
        self.transport.connect()
        print(f"✓ Subscribed to: {', '.join(self.config.topics.subscriptions)}")

    def run(self):
        """Connect and process messages until interrupted."""

        # Register signal handler for graceful shutdown
        def signal_handler(sig, frame):
            print("\n\nReceived interrupt signal")
            self.running = False

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        try:
            self.start()

            print("\n" + "=" * 60)
            print("CAN Bridge Running")
            print("=" * 60)
            print("Press Ctrl+C to stop")
            print("=" * 60 + "\n")

            self.terminal.init_footer()
            self.running = True

            while self.running:
                # Drive transports without a network thread (ZMQ)
                if not self.transport.poll():
                    time.sleep(BridgeConstants.DEFAULT_LOOP_SLEEP)

                self._report()

        except KeyboardInterrupt:
            print("\n\nStopping CAN bridge...")
        finally:
            self.stop()

    def _report(self):
        stats = self.dispatcher.get_stats()
        self.terminal.update_footer(connected=self.transport.is_connected(), stats=stats)

        interval = self.config.bridge.stats_interval
        if self.config.bridge.verbose and time.time() - self.last_stats_time > interval:
            self.terminal.print(format_stats(stats), BridgeConstants.LOG_PREFIX)
            self.last_stats_time = time.time()

    def stop(self):
        """Stop the server and cleanup."""
        self.running = False
        self.terminal.clear_footer()
        self.transport.close()
        print(f"{BridgeConstants.LOG_PREFIX} {format_stats(self.dispatcher.get_stats())}")
        print("✓ CAN bridge stopped")

    def get_stats(self):
        return self.dispatcher.get_stats()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CAN sensor bridge")

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (default: <project-root>/config.yaml)",
    )
    parser.add_argument(
        "--transport",
        choices=["mqtt", "zmq"],
        default=None,
        help="Pub/sub transport (overrides config)",
    )
    parser.add_argument("--host", type=str, default=None, help="MQTT broker host (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="MQTT broker port (overrides config)")
    parser.add_argument("--client-id", type=str, default=None, help="Client id (overrides config)")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every received message and decoded frame",
    )
    parser.add_argument(
        "--no-footer",
        action="store_true",
        help="Disable the persistent status footer",
    )

    return parser.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """CLI flags > config.yaml > constants."""
    if args.transport is not None:
        config.transport.kind = args.transport
    if args.host is not None:
        config.mqtt.host = args.host
    if args.port is not None:
        config.mqtt.port = args.port
    if args.client_id is not None:
        config.transport.client_id = args.client_id
    if args.verbose:
        config.bridge.verbose = True
    if args.no_footer:
        config.bridge.enable_footer = False
    return config


def main(argv=None):
    """Main entry point for the CAN bridge."""
    args = parse_args(argv)

    config = apply_overrides(ConfigManager.load(args.config), args)
    print(f"✓ Configuration loaded")

    try:
        transport = create_transport(config)
    except ValueError as e:
        print(f"✗ {e}")
        return 2

    terminal = TerminalDisplay(enable_footer=config.bridge.enable_footer)
    server = BridgeServer(config=config, transport=transport, terminal=terminal)

    try:
        server.run()
    except TransportError as e:
        print(f"✗ Transport error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
