"""
Helper module to set up and tear down a Minio instance used for the integration tests.
"""

import shlex
import subprocess
import time

import boto3

MINIO_URL = "http://localhost:9000"
MINIO_FAKE_ACCESS_KEY = "minioadmin"
MINIO_FAKE_SECRET_KEY = "badpassword"

DOCKER_COMPOSE_FILE = "docker/minio/docker-compose.yaml"
COMPOSE_COMMAND = shlex.split(f"docker compose -f {DOCKER_COMPOSE_FILE} up -d minio")
HEALTH_CHECK_COMMAND = shlex.split(f"curl -fsI {MINIO_URL}/minio/health/live")
STOP_COMMAND = shlex.split(f"docker compose -f {DOCKER_COMPOSE_FILE} down")

BUCKETS = {
    "bucket1": {
        "reports/2024/": b"",
        "reports/2024/a.json": b'{"name": "a"}',
        "reports/2024/b.json": b'{"name": "b"}',
        "reports/2024/q1/jan/c.json": b'{"name": "c"}',
        "reports/2023/old.json": b'{"name": "old"}',
    },
    "empty-bucket": {},
}


def start_minio() -> None:
    """Start Minio container using Docker compose, wait till available."""
    subprocess.run(COMPOSE_COMMAND, check=True)
    print("Waiting for Minio to start...")

    for _ in range(10):
        time.sleep(2)
        health_check = subprocess.run(HEALTH_CHECK_COMMAND, check=False, capture_output=True)
        if health_check.returncode == 0:
            return
        print("Still waiting for Minio to start...")

    raise RuntimeError("Minio failed to start properly within its allocated time.")


def stop_minio() -> None:
    subprocess.run(STOP_COMMAND, check=True)


def setup_minio_data() -> None:
    """Create the test buckets and add some objects to them in Minio."""
    s3_client = boto3.client(
        "s3",
        endpoint_url=MINIO_URL,
        aws_access_key_id=MINIO_FAKE_ACCESS_KEY,
        aws_secret_access_key=MINIO_FAKE_SECRET_KEY,
    )

    for bucket_name, objects in BUCKETS.items():
        s3_client.create_bucket(Bucket=bucket_name)
        for key, body in objects.items():
            s3_client.put_object(Bucket=bucket_name, Key=key, Body=body)
