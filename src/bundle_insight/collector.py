"""One report run: the surface build tool adapters push facts into.

Adapters call ``record_assets`` and ``record_module`` (from any number of
threads) during the build; ``generate`` is the barrier after which source
attribution, size computation and report assembly run.

Example:
    >>> collector = Collector(ReportConfig(root="/repo", gzip=False))
    >>> collector.record_module(
    ...     "/repo/a/b/bundle.js", bytes=238, format="esm",
    ...     sources=["../x.ts", "../y.ts"],
    ... )
    'a/b/bundle.js'
    >>> collector.record_assets(["/repo/a/b/bundle.js"])
    >>> collector.generate().inputs["a/x.ts"].bytes
    119
"""

import re
import threading
from typing import Mapping, Optional, Sequence, Union

from .attribution import SourceMapGraph, attribute
from .config import ReportConfig
from .exceptions import AttributionWarning, MalformedSourceMapWarning, MissingOutputError
from .graph import ModuleFormat, ModuleGraph
from .logging_config import get_logger
from .paths import PathNormalizer
from .report import Report, build_report
from .sizes import CompressionFn, compute_sizes, gzip_compress
from .sourcemap import SourceMapError, SourceMapSources, read_source_map
from .sourcemap.load import Payload

logger = get_logger(__name__)

_ESM_RE = re.compile(r"\.m[tj]sx?$")
_CJS_RE = re.compile(r"\.c[tj]sx?$")


def guess_format(module_id: str) -> ModuleFormat:
    """Infer a module format from an unambiguous file extension."""
    if _ESM_RE.search(module_id):
        return ModuleFormat.ESM
    if _CJS_RE.search(module_id):
        return ModuleFormat.CJS
    return ModuleFormat.UNKNOWN


class Collector:
    """Collects build facts for one report run and turns them into a Report."""

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        compression: CompressionFn = gzip_compress,
    ):
        self.config = config or ReportConfig()
        self.compression = compression
        self.normalizer = PathNormalizer(self.config.project_root)
        self.graph = ModuleGraph()
        self._include = self.config.include_re
        self._exclude = self.config.exclude_re
        self._lock = threading.Lock()
        self._source_maps: SourceMapGraph = {}
        self._contents: dict[str, bytes] = {}
        self._outputs: dict[str, list[str]] = {}
        self._warnings: list[AttributionWarning] = []
        # Survives reset(): a later pass that reports no assets reuses these.
        self._assets: list[str] = []

    # ── Collection phase ────────────────────────────────────────────

    def should_include(self, module_id: str) -> bool:
        """Whether ``module_id`` passes the include/exclude filters."""
        if self._include is not None and not self._include.search(module_id):
            return False
        return not (self._exclude is not None and self._exclude.search(module_id))

    def record_assets(
        self,
        assets: Sequence[str],
        outputs: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        """Record the build's emitted files and, optionally, their contents.

        ``outputs`` maps an asset path to the module ids bundled into it.
        An empty ``assets`` keeps the previously recorded list.
        """
        with self._lock:
            if assets:
                self._assets = [str(asset) for asset in assets]
            for asset, modules in (outputs or {}).items():
                self._outputs[str(asset)] = [str(module) for module in modules]

    def record_module(
        self,
        module_id: str,
        *,
        bytes: Optional[int] = None,
        format: Union[str, ModuleFormat, None] = None,
        imports: Optional[Sequence[str]] = None,
        sources: Optional[Sequence[str]] = None,
        source_root: Optional[str] = None,
        weights: Optional[Sequence[int]] = None,
        source_map: Optional[Payload] = None,
        code: Union[str, bytes, None] = None,
    ) -> Optional[str]:
        """Merge one module's facts into the graph.

        Args:
            module_id: Tool-native module identifier or path.
            bytes: Compiled size as the tool reports it.
            format: ``esm``/``cjs``/``unknown``; a known format always wins
                over ``unknown``, and ``unknown`` falls back to the extension.
            imports: Statically known import ids, kept in order.
            sources: Source map ``sources`` when the adapter already parsed it.
            source_root: ``sourceRoot`` for ``sources``.
            weights: Generated bytes mapped to each of ``sources``.
            source_map: Raw source map payload to parse instead of ``sources``.
            code: Compiled content; measured for size and used for weights.

        Returns:
            The canonical key, or None when the module was filtered out.
        """
        if not self.should_include(module_id):
            logger.debug("Skipping filtered module %s", module_id)
            return None

        key = self.normalizer.normalize(module_id)
        content = code.encode("utf-8") if isinstance(code, str) else code

        fields: dict = {}
        if bytes is not None:
            fields["bytes"] = bytes
        elif content is not None:
            fields["bytes"] = len(content)

        reported = ModuleFormat.coerce(format)
        if reported is not ModuleFormat.UNKNOWN:
            fields["format"] = reported
        else:
            existing = self.graph.get(key)
            if existing is None or existing.format is ModuleFormat.UNKNOWN:
                fields["format"] = guess_format(module_id)

        if imports is not None:
            fields["imports"] = [self.normalizer.normalize(item) for item in imports]

        self.graph.upsert(key, **fields)

        record = None
        if sources is not None:
            record = SourceMapSources(
                sources=["" if source is None else str(source) for source in sources],
                source_root=source_root,
                weights=list(weights) if weights is not None else None,
            )
        elif source_map is not None:
            text = content.decode("utf-8", errors="replace") if content is not None else None
            try:
                record = read_source_map(source_map, code=text, source_root=source_root)
            except SourceMapError as exc:
                self.add_warning(
                    MalformedSourceMapWarning(key, f"Source map could not be parsed: {exc}")
                )

        with self._lock:
            if record is not None:
                self._source_maps[key] = record
            if content is not None:
                self._contents[key] = content
        return key

    def record_asset_content(self, path: str, data: Union[str, bytes]) -> str:
        """Attach an emitted file's content so its size is measured at generate time.

        Content for a path that never becomes a compiled module is ignored.
        """
        key = self.normalizer.normalize(path)
        content = data.encode("utf-8") if isinstance(data, str) else data
        with self._lock:
            self._contents[key] = content
        return key

    def add_warning(self, warning: AttributionWarning) -> None:
        with self._lock:
            if warning in self._warnings:
                return
            self._warnings.append(warning)
        logger.warning("%s", warning)

    # ── Attribution phase ───────────────────────────────────────────

    def generate(self) -> Report:
        """Attribute sources, compute sizes and build the report.

        Raises:
            MissingOutputError: If no assets were ever recorded.
        """
        with self._lock:
            assets = list(self._assets)
            source_maps = dict(self._source_maps)
            contents = dict(self._contents)
            outputs = {asset: list(modules) for asset, modules in self._outputs.items()}
            warnings = list(self._warnings)

        if not assets:
            raise MissingOutputError()

        result = attribute(self.graph, source_maps, self.normalizer)
        compute_sizes(
            self.graph,
            contents,
            compression=self.compression if self.config.gzip else None,
            attribution=result,
        )
        report = build_report(
            assets,
            self.graph,
            config=self.config,
            warnings=warnings + [w for w in result.warnings if w not in warnings],
            outputs=outputs,
            normalizer=self.normalizer,
        )
        logger.debug(
            "Report built: %d assets, %d inputs, %d warnings",
            len(report.assets),
            len(report.inputs),
            len(report.warnings),
        )
        return report

    def reset(self) -> None:
        """Start a new run; only the last asset list is kept."""
        with self._lock:
            self.graph = ModuleGraph()
            self.normalizer.clear()
            self._source_maps = {}
            self._contents = {}
            self._outputs = {}
            self._warnings = []
