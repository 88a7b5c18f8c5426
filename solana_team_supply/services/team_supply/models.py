"""Data models for team supply analysis."""

import time
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple


class WalletCategory(str, Enum):
    """Classification assigned to every analyzed wallet."""

    NORMAL = "Normal"
    FRESH = "Fresh"
    INACTIVE = "Inactive"
    NO_TOKEN = "No Token"
    NO_ATA_TRANSACTION = "No ATA Transaction"
    ERROR = "Error"


# Categories statistically associated with insider holdings
TEAM_CATEGORIES = frozenset({
    WalletCategory.FRESH,
    WalletCategory.INACTIVE,
    WalletCategory.NO_TOKEN,
    WalletCategory.NO_ATA_TRANSACTION,
})


@dataclass(frozen=True)
class TokenInfo:
    """Token information fetched once per analysis run."""

    address: str
    symbol: str
    name: str
    decimals: int
    total_supply: int  # raw base units

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "total_supply": str(self.total_supply),
        }


@dataclass(frozen=True)
class Holder:
    """A token holder and its raw balance."""

    address: str
    balance: int  # raw base units


@dataclass(frozen=True)
class ClassifiedWallet:
    """A holder together with the outcome of its classification."""

    address: str
    balance: int
    category: WalletCategory
    days_since_last_activity: Optional[int] = None
    funder_address: Optional[str] = None
    funding_details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def from_holder(cls, holder: Holder, category: WalletCategory, **kwargs: Any) -> "ClassifiedWallet":
        """Build a classified wallet for a holder."""
        return cls(address=holder.address, balance=holder.balance, category=category, **kwargs)

    @classmethod
    def failed(cls, holder: Holder, message: str) -> "ClassifiedWallet":
        """Build an ``Error`` wallet carrying the failure message."""
        return cls.from_holder(holder, WalletCategory.ERROR, error=message)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["balance"] = str(self.balance)
        result["category"] = self.category.value
        return result


@dataclass(frozen=True)
class TeamWallet:
    """Reshaped view of a team-controlled wallet."""

    address: str
    balance: str
    percentage: float
    category: WalletCategory
    funder_address: Optional[str] = None
    funding_details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["category"] = self.category.value
        return result


@dataclass(frozen=True)
class ScanData:
    """Full detail view of one analysis run."""

    token_info: TokenInfo
    analyzed_wallets: Tuple[ClassifiedWallet, ...]
    team_wallets: Tuple[TeamWallet, ...]
    total_supply_controlled: Decimal
    token_address: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_info": self.token_info.to_dict(),
            "analyzed_wallets": [w.to_dict() for w in self.analyzed_wallets],
            "team_wallets": [w.to_dict() for w in self.team_wallets],
            "total_supply_controlled": float(self.total_supply_controlled),
            "token_address": self.token_address,
        }


@dataclass(frozen=True)
class TrackingInfo:
    """Projection of the same run intended for long-term tracking."""

    token_address: str
    token_symbol: str
    total_supply: int
    decimals: int
    total_supply_controlled: Decimal
    team_wallets: Tuple[TeamWallet, ...]
    all_wallets_details: Tuple[ClassifiedWallet, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_address": self.token_address,
            "token_symbol": self.token_symbol,
            "total_supply": str(self.total_supply),
            "decimals": self.decimals,
            "total_supply_controlled": float(self.total_supply_controlled),
            "team_wallets": [w.to_dict() for w in self.team_wallets],
            "all_wallets_details": [w.to_dict() for w in self.all_wallets_details],
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Result of a team supply analysis."""

    scan_data: ScanData
    tracking_info: TrackingInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_data": self.scan_data.to_dict(),
            "tracking_info": self.tracking_info.to_dict(),
        }


ProgressSink = Callable[[str, float], None]


@dataclass
class ProgressStep:
    """One timestamped step of an analysis run."""

    step: str
    timestamp: float
    elapsed_ms: int


@dataclass
class AnalysisRun:
    """In-memory progress record for a single orchestrator invocation."""

    operation_id: str
    start_time: float = field(default_factory=time.time)
    steps: List[ProgressStep] = field(default_factory=list)
    sink: Optional[ProgressSink] = None

    def log_step(self, step: str) -> ProgressStep:
        """Append a step and forward it to the progress sink, if any."""
        now = time.time()
        entry = ProgressStep(step=step, timestamp=now, elapsed_ms=int((now - self.start_time) * 1000))
        self.steps.append(entry)
        if self.sink is not None:
            self.sink(step, now)
        return entry
