from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict, Dict, List, Sequence

from .models import PathConflict, SourceStats


class OriginTracker:
	"""Remember which inputs provided each merged path, in input order."""

	def __init__(self) -> None:
		self._origins: DefaultDict[str, List[int]] = defaultdict(list)

	def record(self, path: str, source_index: int) -> None:
		providers = self._origins[path]
		if providers and providers[-1] == source_index:
			return
		providers.append(source_index)

	def items(self) -> List[tuple[str, List[int]]]:
		return [(path, list(providers)) for path, providers in self._origins.items()]


def detect_path_conflicts(tracker: OriginTracker, source_names: Sequence[str]) -> List[PathConflict]:
	"""Return one record per path provided by more than one input, sorted by path."""

	conflicts: List[PathConflict] = []
	for path, providers in sorted(tracker.items()):
		if len(providers) < 2:
			continue
		names = [source_names[index] for index in providers]
		conflicts.append(PathConflict(path=path, sources=names, winner=names[-1]))
	return conflicts


def tally_source_stats(tracker: OriginTracker, stats: Sequence[SourceStats]) -> None:
	"""Fill kept/overridden counters on each input's stats from the final origins."""

	by_index: Dict[int, SourceStats] = {item.index: item for item in stats}
	for _path, providers in tracker.items():
		by_index[providers[-1]].kept += 1
		for index in providers[:-1]:
			by_index[index].overridden += 1


__all__ = [
	"OriginTracker",
	"detect_path_conflicts",
	"tally_source_stats",
]
