"""
Transport integrations

    - mqtt: MqttTransport (production broker)
    - zmq: ZmqTransport and BusBroker (local bus)
"""
