"""シミュレーションの進行状況を監視・記録するモジュール"""

import json
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from .state import compute_derived_quantities  # noqa: E402


class SimulationMonitor:
    """シミュレーションの進行状況を監視・記録するクラス

    各ステップの総水量・最大流速・最大フルード数を記録し、
    JSONレポートと時系列プロットを出力します。
    """

    def __init__(self, dx: float, gravity: float, logger=None):
        self.dx = dx
        self.gravity = gravity
        self.logger = logger or logging.getLogger(__name__)

        self.statistics: Dict[str, list] = {
            "time_history": [],
            "total_mass": [],
            "max_velocity": [],
            "max_froude": [],
        }
        self.error_report: Optional[Dict[str, Any]] = None

    def update(self, time: float, solution: np.ndarray, topography: np.ndarray) -> None:
        """状態の統計情報を記録"""
        derived = compute_derived_quantities(solution, topography, self.gravity)
        self.statistics["time_history"].append(float(time))
        self.statistics["total_mass"].append(float(np.sum(derived.depth) * self.dx))
        self.statistics["max_velocity"].append(float(np.nanmax(np.abs(derived.velocity))))
        self.statistics["max_froude"].append(float(np.nanmax(derived.froude)))

    def record_errors(self, report) -> None:
        self.error_report = report.to_dict()

    def get_summary(self) -> Dict[str, Any]:
        """シミュレーションの概要を取得"""
        stats = self.statistics
        if not stats["time_history"]:
            return {"recorded_steps": 0}
        initial_mass = stats["total_mass"][0]
        return {
            "recorded_steps": len(stats["time_history"]),
            "final_time": stats["time_history"][-1],
            "mass_variation": stats["total_mass"][-1] - initial_mass,
            "max_velocity": max(stats["max_velocity"]),
            "max_froude": max(stats["max_froude"]),
        }

    def generate_report(self, output_dir: Path) -> Path:
        """統計情報をJSONファイルに保存"""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        report_path = output_dir / "statistics.json"
        report = {"summary": self.get_summary(), "statistics": self.statistics}
        if self.error_report is not None:
            report["errors"] = self.error_report
        with open(report_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)

        self.logger.info(f"統計情報を保存: {report_path}")
        return report_path

    def plot_history(self, output_dir: Path) -> None:
        """総水量と最大フルード数の時系列をプロット"""
        plot_dir = Path(output_dir) / "plots"
        plot_dir.mkdir(parents=True, exist_ok=True)

        panels = [
            ("total_mass", "Total Mass", "sum(h) dx", "total_mass.png"),
            ("max_froude", "Maximum Froude Number", "Fr", "max_froude.png"),
        ]
        for key, title, ylabel, filename in panels:
            plt.figure(figsize=(10, 5))
            plt.plot(self.statistics["time_history"], self.statistics[key])
            plt.title(title)
            plt.xlabel("Time")
            plt.ylabel(ylabel)
            plt.tight_layout()
            plt.savefig(plot_dir / filename)
            plt.close()

    def plot_solution(
        self,
        output_dir: Path,
        cell_centers: np.ndarray,
        solution: np.ndarray,
        topography: np.ndarray,
        exact: Optional[np.ndarray] = None,
        filename: str = "final_solution.png",
    ) -> Path:
        """自由水面と地形（あれば厳密解も）をプロット"""
        plot_dir = Path(output_dir) / "plots"
        plot_dir.mkdir(parents=True, exist_ok=True)

        fig, (ax_h, ax_q) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
        ax_h.plot(cell_centers, solution[:, 0] + topography, label="H = h + z")
        ax_h.plot(cell_centers, topography, color="saddlebrown", label="z")
        ax_q.plot(cell_centers, solution[:, 1], label="q")
        if exact is not None:
            ax_h.plot(cell_centers, exact[:, 0] + topography, "k--", label="exact")
            ax_q.plot(cell_centers, exact[:, 1], "k--", label="exact")
        ax_h.set_ylabel("Elevation")
        ax_q.set_ylabel("Discharge")
        ax_q.set_xlabel("x")
        ax_h.legend()
        ax_q.legend()
        fig.tight_layout()

        filepath = plot_dir / filename
        fig.savefig(filepath)
        plt.close(fig)
        return filepath
