"""
RPC Client for Solana

Provides the JSON-RPC ledger transport with:
- Multiple endpoint fallback
- Retry logic
- Rate limit handling
- Request timeout management
"""

from __future__ import annotations

import base64
import logging
import time
import threading
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass

import httpx

from ..errors import ErrorCode, RpcError, ConfigurationError
from ..config import config as global_config
from ..types import AccountInfo, SignatureStatus

logger = logging.getLogger(__name__)

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


def _after_timeout(timed_out: RpcError, later: Optional[RpcError]) -> RpcError:
    """Report a failure that followed a timed-out attempt as a timeout"""
    if later is None or later is timed_out or later.code == ErrorCode.RPC_TIMEOUT:
        return timed_out
    error = RpcError(
        f"{timed_out.message}; later attempt failed: {later.message}",
        code=ErrorCode.RPC_TIMEOUT,
        original_error=later,
        endpoint=timed_out.endpoint,
    )
    error.details["later_endpoint"] = later.endpoint
    error.details["rpc_error_code"] = later.rpc_error_code
    error.details["rpc_error_data"] = later.rpc_error_data
    return error


@dataclass
class RpcClientConfig:
    """
    RPC client runtime configuration

    Allows per-client overrides while pulling defaults from the global config
    (stableswap_client.config.RpcConfig).

    Usage:
        # Use all defaults from environment
        client = RpcClient(endpoint)

        # Override specific settings
        config = RpcClientConfig(timeout_seconds=60, max_retries=5)
        client = RpcClient(endpoint, config=config)
    """
    timeout_seconds: float = None
    max_retries: int = None
    retry_delay_seconds: float = None
    commitment: str = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.timeout_seconds is None:
            self.timeout_seconds = global_config.rpc.timeout_seconds
        if self.max_retries is None:
            self.max_retries = global_config.rpc.max_retries
        if self.retry_delay_seconds is None:
            self.retry_delay_seconds = global_config.rpc.retry_delay_seconds
        if self.commitment is None:
            self.commitment = global_config.rpc.commitment
        if self.commitment not in _COMMITMENT_RANK:
            raise ConfigurationError.invalid("commitment", f"Unknown commitment level: {self.commitment}")


class RpcClient:
    """
    Solana JSON-RPC client implementing LedgerTransport

    Usage:
        # Single endpoint
        rpc = RpcClient("https://api.mainnet-beta.solana.com")

        # Multiple endpoints with fallback
        rpc = RpcClient([
            "https://primary-rpc.example.com",
            "https://backup-rpc.example.com",
        ])

        account = rpc.fetch_account("PoolAddress...")
    """

    def __init__(
        self,
        endpoint: Union[str, List[str]],
        config: Optional[RpcClientConfig] = None,
    ):
        """
        Initialize RPC client

        Args:
            endpoint: RPC endpoint URL or list of URLs (for fallback)
            config: RPC configuration options
        """
        self._endpoints = [endpoint] if isinstance(endpoint, str) else list(endpoint)
        if not self._endpoints:
            raise ConfigurationError.missing("RPC endpoint")

        self._config = config or RpcClientConfig()
        self._current_endpoint_idx = 0
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Optional[RpcClientConfig] = None) -> "RpcClient":
        """Create client for SOLANA_RPC_URL (comma separated for fallback)"""
        url = global_config.rpc.url
        if not url:
            raise ConfigurationError.missing("SOLANA_RPC_URL")
        return cls([u.strip() for u in url.split(",") if u.strip()], config=config)

    @property
    def endpoint(self) -> str:
        """Current active endpoint"""
        return self._endpoints[self._current_endpoint_idx]

    @property
    def commitment(self) -> str:
        """Default commitment level"""
        return self._config.commitment

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client (thread-safe)"""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(
                        timeout=self._config.timeout_seconds,
                        headers={"Content-Type": "application/json"},
                    )
        return self._client

    def _rotate_endpoint(self):
        """Rotate to next endpoint on failure"""
        if len(self._endpoints) > 1:
            self._current_endpoint_idx = (self._current_endpoint_idx + 1) % len(self._endpoints)
            logger.info(f"Rotating to RPC endpoint: {self.endpoint}")

    def call(
        self,
        method: str,
        params: List[Any],
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Make JSON-RPC call

        Args:
            method: RPC method name
            params: RPC parameters
            timeout: Optional timeout override

        Returns:
            RPC result

        Raises:
            RpcError: On RPC failure. Once any attempt has timed out after the
                request left the client, every later failure is reported as
                RPC_TIMEOUT since the node may already have acted on it.
        """
        client = self._get_client()
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }

        last_error: Optional[RpcError] = None
        timed_out: Optional[RpcError] = None
        endpoints_tried = 0
        max_endpoints = len(self._endpoints)
        timeout_val = timeout or self._config.timeout_seconds

        while endpoints_tried < max_endpoints:
            for attempt in range(self._config.max_retries):
                try:
                    response = client.post(
                        self.endpoint,
                        json=body,
                        timeout=timeout_val,
                    )

                    if response.status_code == 429:
                        logger.warning(f"Rate limited by {self.endpoint}")
                        last_error = RpcError.rate_limited(self.endpoint)
                        time.sleep(self._config.retry_delay_seconds * (attempt + 1))
                        continue

                    response.raise_for_status()
                    result = response.json()

                    if "error" in result:
                        error = result["error"]
                        error_msg = error.get("message", str(error))
                        rpc_error = RpcError(
                            f"RPC error: {error_msg}",
                            code=ErrorCode.RPC_INVALID_RESPONSE,
                            endpoint=self.endpoint,
                        )
                        # Preserve RPC error code and data (e.g. preflight logs)
                        rpc_error.details["rpc_error_code"] = error.get("code")
                        rpc_error.details["rpc_error_data"] = error.get("data")
                        if timed_out is not None:
                            raise _after_timeout(timed_out, rpc_error)
                        raise rpc_error

                    return result.get("result")

                except httpx.ConnectTimeout as e:
                    last_error = RpcError.connection_failed(self.endpoint, e)
                    logger.warning(f"RPC connect timeout (attempt {attempt + 1}): {self.endpoint}")

                except httpx.TimeoutException:
                    last_error = RpcError.timeout(self.endpoint, timeout_val)
                    if timed_out is None:
                        timed_out = last_error
                    logger.warning(f"RPC timeout (attempt {attempt + 1}): {self.endpoint}")

                except httpx.HTTPStatusError as e:
                    last_error = RpcError(
                        f"HTTP error {e.response.status_code}",
                        code=ErrorCode.RPC_INVALID_RESPONSE,
                        endpoint=self.endpoint,
                        original_error=e,
                    )
                    logger.warning(f"RPC HTTP error (attempt {attempt + 1}): {e}")

                except httpx.RequestError as e:
                    last_error = RpcError.connection_failed(self.endpoint, e)
                    logger.warning(f"RPC connection error (attempt {attempt + 1}): {e}")

                except ValueError as e:
                    last_error = RpcError(
                        f"Invalid JSON response: {e}",
                        code=ErrorCode.RPC_INVALID_RESPONSE,
                        endpoint=self.endpoint,
                        original_error=e,
                    )
                    logger.warning(f"RPC invalid response (attempt {attempt + 1}): {e}")

                if attempt < self._config.max_retries - 1:
                    time.sleep(self._config.retry_delay_seconds * (attempt + 1))

            self._rotate_endpoint()
            endpoints_tried += 1

        if timed_out is not None:
            raise _after_timeout(timed_out, last_error)
        raise last_error or RpcError("All RPC endpoints failed")

    def get_account_info(
        self,
        address: str,
        encoding: str = "base64",
        commitment: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Get account information

        Args:
            address: Account address (base58)
            encoding: Data encoding
            commitment: Commitment level

        Returns:
            Account info or None if not found
        """
        params = [
            address,
            {
                "encoding": encoding,
                "commitment": commitment or self.commitment,
            },
        ]
        result = self.call("getAccountInfo", params)
        return result.get("value") if result else None

    def get_latest_blockhash(self, commitment: Optional[str] = None) -> str:
        """Get latest blockhash (base58)"""
        params = [{"commitment": commitment or self.commitment}]
        result = self.call("getLatestBlockhash", params)
        blockhash = (result or {}).get("value", {}).get("blockhash")
        if not blockhash:
            raise RpcError(
                "getLatestBlockhash returned no blockhash",
                code=ErrorCode.RPC_INVALID_RESPONSE,
                endpoint=self.endpoint,
            )
        return blockhash

    def get_minimum_balance_for_rent_exemption(self, size: int, commitment: Optional[str] = None) -> int:
        """Lamports required for an account of ``size`` bytes to be rent exempt"""
        params = [size, {"commitment": commitment or self.commitment}]
        return int(self.call("getMinimumBalanceForRentExemption", params))

    def send_transaction(
        self,
        transaction: bytes,
        skip_preflight: Optional[bool] = None,
        preflight_commitment: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> str:
        """
        Send signed transaction

        Args:
            transaction: Signed transaction bytes
            skip_preflight: Skip preflight simulation (default from config.tx)
            preflight_commitment: Preflight commitment level (default from config.tx)
            max_retries: Max node-side rebroadcast retries

        Returns:
            Transaction signature (base58)
        """
        tx_data = base64.b64encode(transaction).decode("ascii")

        if skip_preflight is None:
            skip_preflight = global_config.tx.skip_preflight

        params = [
            tx_data,
            {
                "skipPreflight": skip_preflight,
                "preflightCommitment": preflight_commitment or global_config.tx.preflight_commitment,
                "encoding": "base64",
            },
        ]
        if max_retries is not None:
            params[1]["maxRetries"] = max_retries

        return self.call("sendTransaction", params)

    def get_signature_statuses(
        self,
        signatures: List[str],
        search_transaction_history: bool = False,
    ) -> List[Optional[Dict[str, Any]]]:
        """Raw getSignatureStatuses values (None for unknown signatures)"""
        params = [signatures, {"searchTransactionHistory": search_transaction_history}]
        result = self.call("getSignatureStatuses", params)
        return result.get("value", []) if result else []

    # LedgerTransport

    def fetch_account(self, address: str) -> Optional[AccountInfo]:
        """Fetch and base64-decode account data"""
        value = self.get_account_info(str(address), encoding="base64")
        if not value:
            return None

        data = value.get("data", [])
        if isinstance(data, list) and len(data) > 0:
            raw_data = base64.b64decode(data[0])
        elif isinstance(data, str):
            raw_data = base64.b64decode(data)
        else:
            raise RpcError(
                f"Unexpected account data encoding for {address}",
                code=ErrorCode.RPC_INVALID_RESPONSE,
                endpoint=self.endpoint,
            )

        return AccountInfo(
            data=raw_data,
            owner=value.get("owner", ""),
            lamports=value.get("lamports", 0),
        )

    def get_confirmation_status(self, signature: str) -> SignatureStatus:
        """
        Map getSignatureStatuses onto pending/confirmed/failed

        A signature counts as confirmed once it reaches the client's
        commitment level.
        """
        statuses = self.get_signature_statuses([signature])
        status = statuses[0] if statuses else None
        if not status:
            return SignatureStatus.pending()

        slot = status.get("slot")
        if status.get("err"):
            return SignatureStatus.failed(status["err"], slot=slot)

        # Older nodes omit confirmationStatus; confirmations=None means rooted
        conf = status.get("confirmationStatus")
        if conf is None and status.get("confirmations", 0) is None:
            conf = "finalized"
        if conf is not None and _COMMITMENT_RANK.get(conf, -1) >= _COMMITMENT_RANK[self.commitment]:
            return SignatureStatus.confirmed(slot=slot)
        return SignatureStatus.pending()

    def minimum_balance_for_rent_exemption(self, size: int) -> int:
        return self.get_minimum_balance_for_rent_exemption(size)

    def close(self):
        """Close HTTP client"""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
