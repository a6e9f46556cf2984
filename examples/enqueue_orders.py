"""Enqueue a few order events using a connection string from the environment.

    AZURE_STORAGE_CONNECTION_STRING=... python examples/enqueue_orders.py
"""

import json
import os

from conveyor import QueueWriter, QueueWriterConfig
from conveyor.azure import AzureAuthConfig, AzureQueueConnection
from conveyor.logging import configure_logging


def main() -> None:
    configure_logging(level="INFO")
    auth = AzureAuthConfig(connection_string=os.environ["AZURE_STORAGE_CONNECTION_STRING"])
    connection = AzureQueueConnection(auth)
    config = QueueWriterConfig.from_dict({"queueName": "orders", "timeToLiveInSeconds": 3600, "batchSize": 50})

    with QueueWriter(config, connection) as writer:
        for order_id in range(120):
            writer.write({"messageContent": json.dumps({"order_id": order_id, "status": "created"})})

    print(json.dumps(writer.result.to_dict()))
    connection.close()


if __name__ == "__main__":
    main()
