import logging
import time

import httpx

import funding.constants as C

log = logging.getLogger("funding.probe")


def parse_quantity(value) -> int:
    """JSON-RPC quantities are 0x-hex strings; some nodes answer in decimal."""
    if isinstance(value, bool):
        raise TypeError(f"Not a quantity: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


def block_height(url: str, client: httpx.Client, method: str = C.BLOCK_HEIGHT_METHOD) -> int:
    payload = {"method": method, "params": [], "id": 1, "jsonrpc": "2.0"}
    r = client.post(url, json=payload)
    r.raise_for_status()
    return parse_quantity(r.json()["result"])


def wait_until_ready(
    url: str,
    max_attempts: int = C.READY_ATTEMPTS,
    poll_interval: float = C.READY_INTERVAL,
    *,
    client: httpx.Client | None = None,
    method: str = C.BLOCK_HEIGHT_METHOD,
) -> bool:
    """Poll the node until it reports a positive block height.

    Args:
        url: JSON-RPC endpoint
        max_attempts: Number of probes before giving up
        poll_interval: Seconds to wait between failed probes
        client: Optional httpx client, one is created (and closed) if omitted
        method: Block height RPC method

    Returns:
        True once the node answers with a positive height, False when the
        attempt budget is spent.
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=C.RPC_TIMEOUT)

    try:
        for attempt in range(1, max_attempts + 1):
            try:
                height = block_height(url, client, method)
            except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                log.info("Node not ready yet (attempt %d/%d): %s - %s", attempt, max_attempts, e.__class__.__name__, e)
            else:
                if height > 0:
                    log.info("Node responding at block %d (attempt %d/%d)", height, attempt, max_attempts)
                    return True
                log.info("Node at block %d, waiting for a positive height (attempt %d/%d)", height, attempt, max_attempts)

            if attempt < max_attempts:
                time.sleep(poll_interval)

        log.error("Node at %s not ready after %d attempts", url, max_attempts)
        return False
    finally:
        if owns_client:
            client.close()
