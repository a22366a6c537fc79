from dataclasses import dataclass, field

from config import AppConfig, PerformanceConfig
from core.accessor import ResilientElementAccessor
from core.driver import InterfaceDriver
from core.metrics import MetricsCollector
from core.units import DEFAULT_CATALOG, UnitCatalog
from core.waiting import WaitEngine


@dataclass
class SessionContext:
    """
    Everything a component needs to talk to the one interface session of a run.

    Built once after the browser is up and handed to every component
    constructor; nothing reaches the driver through module globals.
    """

    driver: InterfaceDriver
    app_config: AppConfig
    catalog: UnitCatalog = DEFAULT_CATALOG
    metrics: MetricsCollector = field(default_factory=MetricsCollector)
    wait_engine: WaitEngine = field(init=False)
    accessor: ResilientElementAccessor = field(init=False)

    def __post_init__(self) -> None:
        self.wait_engine = WaitEngine(
            poll_interval_ms=self.app_config.performance.poll_interval_ms,
            metrics_collector=self.metrics,
        )
        self.accessor = ResilientElementAccessor(
            self.driver,
            self.wait_engine,
            default_timeout_ms=self.app_config.performance.selector_timeout,
        )

    @property
    def timeouts(self) -> PerformanceConfig:
        return self.app_config.performance
