# Copyright 2016 by MPI-SWS and Data-Ken Research.
# Licensed under the Apache 2.0 License.
"""Read an MQTT subscription as an event stream, using the paho-mqtt client.

paho runs its network loop in its own thread and reports messages through
callbacks. MQTTReader turns those callbacks into events dispatched on the
asyncio event loop, so the reader can be drained with read_stream()::

    reader = MQTTReader('localhost', topics=[('sensors/#', 0)])
    reader.start()
    async for msg in read_stream()(reader):
        print(msg.topic, msg.payload)

Pre-requisites: An MQTT broker (on host:port) --- tested with mosquitto
                The paho.mqtt python client for mqtt (pip install paho-mqtt)
"""
import asyncio
from collections import namedtuple
import logging
logger = logging.getLogger(__name__)

import paho.mqtt.client as paho

from awaitify.base import OutputThing
from awaitify.internal import call_in_loop


MQTTEvent = namedtuple('MQTTEvent', ['timestamp', 'state', 'mid', 'topic', 'payload', 'qos', 'dup', 'retain' ])


class MQTTDisconnectError(Exception):
    """The connection to the broker was lost (or refused) without stop()
    being called.
    """
    def __init__(self, reason_code):
        super().__init__("MQTT connection lost: %s" % reason_code)
        self.reason_code = reason_code


class MQTTReader(OutputThing):
    """An reader that creates a stream from an MQTT broker. Initialize the
    reader with a list of topics to subscribe to. The topics parameter
    is a list of (topic, qos) pairs.

    Each message is dispatched as an MQTTEvent. When stop() is called, the
    stream completes. If the connection is lost or refused, the stream
    reports an MQTTDisconnectError.

    A client with the paho Client interface may be passed in, in which case
    client_id, client_username and client_password are ignored.
    """
    def __init__(self, host, port=1883, topics=(), client_id="",
                 client_username="", client_password=None, keepalive=60,
                 client=None, event_loop=None):
        super().__init__()
        self.host = host
        self.port = port
        self.topics = list(topics)
        self.keepalive = keepalive
        self.event_loop = event_loop
        self.stop_requested = False
        self.closed = False
        if client is None:
            client = paho.Client(paho.CallbackAPIVersion.VERSION2,
                                 client_id=client_id)
            if client_username:
                client.username_pw_set(client_username,
                                       password=client_password)
        self.client = client
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message
        self.client.on_disconnect = self._on_disconnect

    def start(self):
        """Connect to the broker and start the client's network thread. This
        should be called from the event loop the events are dispatched on.
        """
        if self.event_loop is None:
            self.event_loop = asyncio.get_running_loop()
        logger.info("Connecting to MQTT broker at %s:%s" % (self.host, self.port))
        self.client.connect(self.host, self.port, self.keepalive)
        self.client.loop_start()

    def stop(self):
        """Disconnect from the broker. The stream completes once the
        disconnect has gone through.
        """
        self.stop_requested = True
        self.client.disconnect()

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            logger.error("%s: connection refused: %s" % (self, reason_code))
            self._close(MQTTDisconnectError(reason_code))
            return
        logger.info("%s: connected" % self)
        # Subscribing in on_connect() means that if we lose the connection and
        # reconnect then subscriptions will be renewed.
        if self.topics:
            client.subscribe(self.topics)

    def _on_message(self, client, userdata, msg):
        m = MQTTEvent(msg.timestamp, msg.state, msg.mid, msg.topic,
                      msg.payload, msg.qos, msg.dup, msg.retain)
        call_in_loop(self.event_loop, self._dispatch_if_open, m)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        client.loop_stop()
        if self.stop_requested:
            logger.info("%s: disconnected" % self)
            self._close(None)
        else:
            logger.error("%s: unexpected disconnect: %s" % (self, reason_code))
            self._close(MQTTDisconnectError(reason_code))

    def _close(self, error):
        call_in_loop(self.event_loop, self._dispatch_close, error)

    def _dispatch_if_open(self, m):
        if not self.closed:
            self._dispatch_next(m)

    def _dispatch_close(self, error):
        if self.closed:
            return
        self.closed = True
        if error is None:
            self._dispatch_completed()
        else:
            self._dispatch_error(error)

    def __str__(self):
        return 'MQTTReader(%s)' % ', '.join([topic for (topic,qos) in self.topics])
