"""
Assertion helpers for inspecting a mock MQTT client.
"""


def published(client, topic):
    """Payloads published to a topic, in order."""
    return [c[0][1] for c in client.publish.call_args_list if c[0][0] == topic]


def published_topics(client):
    """Topics published to, in order."""
    return [c[0][0] for c in client.publish.call_args_list]
