"""シミュレーション設定を管理するモジュール

YAMLファイルの各セクションをデータクラスとして保持し、値の妥当性を検証します。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Any
import yaml

SCHEME_NAMES = ("expliciteuler", "euler", "rk2", "rk4")
FLUX_NAMES = ("rusanov", "hll")
TOPOGRAPHY_TYPES = ("FlatBottom", "Bump")
INITIAL_CONDITION_TYPES = (
    "UniformHeightAndDischarge",
    "DamBreakWet",
    "DamBreakDry",
    "SinePerturbation",
)
BOUNDARY_TYPES = ("Neumann", "Wall")
TEST_CASES = ("RestingLake", "DamBreakWet")


@dataclass
class MeshConfig:
    """計算領域と格子の設定を保持するクラス"""

    xmin: float = 0.0
    xmax: float = 1.0
    dx: float = 0.01

    def __post_init__(self):
        # YAMLでは "1e-3" が文字列として読まれるため数値に変換する
        self.xmin = float(self.xmin)
        self.xmax = float(self.xmax)
        self.dx = float(self.dx)

    def validate(self) -> None:
        if self.dx <= 0:
            raise ValueError("空間刻み幅dxは正の値である必要があります")
        if self.xmax <= self.xmin:
            raise ValueError("xmaxはxminより大きい必要があります")
        if self.dx > self.xmax - self.xmin:
            raise ValueError("dxが計算領域の長さを超えています")


@dataclass
class TimeConfig:
    """時間積分の設定を保持するクラス"""

    scheme: str = "RK2"
    time_step: float = 0.001
    initial_time: float = 0.0
    final_time: float = 1.0

    def __post_init__(self):
        self.time_step = float(self.time_step)
        self.initial_time = float(self.initial_time)
        self.final_time = float(self.final_time)

    def validate(self) -> None:
        if self.scheme.lower() not in SCHEME_NAMES:
            raise ValueError(f"未対応の時間積分法: {self.scheme}")
        if self.time_step <= 0:
            raise ValueError("時間刻み幅は正である必要があります")
        if self.final_time < self.initial_time:
            raise ValueError("final_timeはinitial_time以上である必要があります")


@dataclass
class PhysicsConfig:
    """物理モデルの設定を保持するクラス"""

    gravity: float = 9.81
    topography: str = "FlatBottom"
    initial_condition: str = "UniformHeightAndDischarge"
    initial_height: float = 1.0
    initial_discharge: float = 0.0
    left_bc: str = "Neumann"
    right_bc: str = "Neumann"
    flux: str = "Rusanov"
    test_case: Optional[str] = None

    def __post_init__(self):
        self.gravity = float(self.gravity)
        self.initial_height = float(self.initial_height)
        self.initial_discharge = float(self.initial_discharge)

    def validate(self) -> None:
        if self.gravity <= 0:
            raise ValueError("重力加速度は正の値である必要があります")
        if self.topography not in TOPOGRAPHY_TYPES:
            raise ValueError(f"未対応の地形: {self.topography}")
        if self.initial_condition not in INITIAL_CONDITION_TYPES:
            raise ValueError(f"未対応の初期条件: {self.initial_condition}")
        for bc in (self.left_bc, self.right_bc):
            if bc not in BOUNDARY_TYPES:
                raise ValueError(f"未対応の境界条件: {bc}")
        if self.flux.lower() not in FLUX_NAMES:
            raise ValueError(f"未対応の数値流束: {self.flux}")
        if self.test_case is not None and self.test_case not in TEST_CASES:
            raise ValueError(f"未対応のテストケース: {self.test_case}")


@dataclass
class OutputConfig:
    """出力の設定を保持するクラス"""

    results_dir: Path = Path("results")
    save_frequency: int = 1
    save_final_time_only: bool = False
    checkpoint_frequency: int = 0  # 0で無効
    plot: bool = False

    def __post_init__(self):
        if isinstance(self.results_dir, str):
            self.results_dir = Path(self.results_dir)
        # YAMLの 5.0 のような整数値の浮動小数点はファイル名に使うため整数に揃える
        for name in ("save_frequency", "checkpoint_frequency"):
            value = getattr(self, name)
            if isinstance(value, float) and value.is_integer():
                setattr(self, name, int(value))

    @property
    def probe_frequency(self) -> int:
        """プローブ出力の間隔（スナップショット間隔の1/10、最小1）"""
        return max(self.save_frequency // 10, 1)

    def validate(self) -> None:
        if not str(self.results_dir):
            raise ValueError("results_dirは空にできません")
        for name in ("save_frequency", "checkpoint_frequency"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name}は整数である必要があります: {value!r}")
        if self.save_frequency < 1:
            raise ValueError("save_frequencyは1以上である必要があります")
        if self.checkpoint_frequency < 0:
            raise ValueError("checkpoint_frequencyは非負である必要があります")


@dataclass
class ProbeConfig:
    """プローブ（観測点）の設定を保持するクラス"""

    references: List[int] = field(default_factory=list)
    positions: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.positions)

    def validate(self) -> None:
        if len(self.references) != len(self.positions):
            raise ValueError("プローブの番号と位置の数が一致しません")
        if len(set(self.references)) != len(self.references):
            raise ValueError("プローブ番号が重複しています")


@dataclass
class LoggingConfig:
    """ログ出力の設定を保持するクラス"""

    verbosity: int = 1
    log_dir: Optional[Path] = None  # Noneの場合は results_dir/logs
    file_logging: bool = True

    def validate(self) -> None:
        if self.verbosity not in (0, 1, 2):
            raise ValueError("verbosityは0, 1, 2のいずれかである必要があります")


@dataclass
class SimulationConfig:
    """シミュレーション全体の設定を保持するクラス"""

    mesh: MeshConfig = field(default_factory=MeshConfig)
    time: TimeConfig = field(default_factory=TimeConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    probes: ProbeConfig = field(default_factory=ProbeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def is_test_case(self) -> bool:
        """厳密解との比較を行うかどうか"""
        return self.physics.test_case is not None

    @property
    def log_dir(self) -> Path:
        if self.logging.log_dir is not None:
            return Path(self.logging.log_dir)
        return self.output.results_dir / "logs"

    def validate(self) -> None:
        """設定値の妥当性を検証"""
        self.mesh.validate()
        self.time.validate()
        self.physics.validate()
        self.output.validate()
        self.probes.validate()
        self.logging.validate()

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SimulationConfig":
        """辞書から設定を生成し、妥当性を検証する

        Raises:
            ValueError: 未知のキーや無効な値が含まれる場合
        """
        config_dict = config_dict or {}
        sections = {
            "mesh": MeshConfig,
            "time": TimeConfig,
            "physics": PhysicsConfig,
            "output": OutputConfig,
            "probes": ProbeConfig,
            "logging": LoggingConfig,
        }
        unknown = set(config_dict) - set(sections)
        if unknown:
            raise ValueError(f"未知の設定セクション: {sorted(unknown)}")

        kwargs = {}
        for name, section_cls in sections.items():
            try:
                kwargs[name] = section_cls(**(config_dict.get(name) or {}))
            except TypeError as e:
                raise ValueError(f"{name}セクションの設定が不正です: {e}") from e

        config = cls(**kwargs)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, filepath: str) -> "SimulationConfig":
        """YAMLファイルから設定を読み込む"""
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """設定を辞書形式にシリアライズ"""
        return {
            "mesh": vars(self.mesh).copy(),
            "time": vars(self.time).copy(),
            "physics": vars(self.physics).copy(),
            "output": {**vars(self.output), "results_dir": str(self.output.results_dir)},
            "probes": {
                "references": list(self.probes.references),
                "positions": list(self.probes.positions),
            },
            "logging": {
                **vars(self.logging),
                "log_dir": None
                if self.logging.log_dir is None
                else str(self.logging.log_dir),
            },
        }
