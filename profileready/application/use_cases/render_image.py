from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from profileready.application.use_cases.publish_preview import PublishPreviewUseCase
from profileready.domain.entities.asset import Asset, AssetRole
from profileready.domain.entities.raster_operation import (
    NORTH,
    AutoOrient,
    BrightnessContrast,
    CompositeOver,
    CropPercent,
    Extent,
    RasterOperation,
    Repage,
    Resize,
    ResizeFill,
)
from profileready.domain.entities.render_parameters import RenderParameters, TargetSize
from profileready.domain.errors import InvalidParameterError, OverlayNotFoundError
from profileready.infrastructure.executors.base import RasterExecutor
from profileready.infrastructure.storage.asset_store import LocalAssetStore, new_asset_id

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    asset_id: str
    preview_url: str
    width: int
    height: int


def base_operations(params: RenderParameters, target: TargetSize) -> list[RasterOperation]:
    """Crop -> repage -> resize-fill -> north-anchored extent -> brightness/contrast."""
    return [
        AutoOrient(),
        CropPercent(params.crop),
        Repage(),
        ResizeFill(target.width, target.height),
        Extent(target.width, target.height, params.executor_color, gravity=NORTH),
        BrightnessContrast(params.brightness_adjustment, params.contrast_adjustment),
    ]


@dataclass
class RenderImageUseCase:
    store: LocalAssetStore
    executor: RasterExecutor
    publisher: PublishPreviewUseCase
    overlay_dir: Path

    def execute(self, params: RenderParameters) -> RenderResult:
        """
        Render a new asset from the original behind ``params.asset_id``.

        Renders always start from the ORIGINAL upload, even when the client
        references a previous render, so edits never accumulate.

        Everything that can be rejected (asset, size, overlay) is checked
        before the first executor call, so a rejected request leaves no
        files behind. Each executor call consumes the previous call's output.
        """
        if not params.asset_id:
            raise InvalidParameterError("Missing assetId")
        original = self.store.find_original(params.asset_id)
        target = TargetSize.parse(params.size)
        overlay_path = self._overlay_path(params)

        asset_id = new_asset_id()
        base = self.store.temporary(asset_id, AssetRole.BASE)
        final = self.store.served(asset_id, AssetRole.RENDERED)
        temporaries = [base.path]
        logger.info(
            "Rendering %s from %s at %s (overlay=%s)", asset_id, original.id, target, params.overlay or "none"
        )
        try:
            self.executor.run(original.path, base_operations(params, target), base.path)
            if overlay_path is not None:
                scaled = self.store.temporary(asset_id, AssetRole.OVERLAY)
                temporaries.append(scaled.path)
                self._composite(base, overlay_path, scaled, final, params, target)
            else:
                # no overlay: the base raster is the final raster
                self.executor.run(base.path, [], final.path)
        except Exception:
            self.store.discard(final.path)
            raise
        finally:
            for path in temporaries:
                self.store.discard(path)

        self.store.link_root(asset_id, original)
        return RenderResult(
            asset_id=asset_id,
            preview_url=self.publisher.execute(final, "renders"),
            width=target.width,
            height=target.height,
        )

    def _overlay_path(self, params: RenderParameters) -> Path | None:
        selected = params.resolve_overlay()
        if selected is None:
            return None
        path = self.overlay_dir / selected.filename
        if not path.is_file():
            raise OverlayNotFoundError(f"Overlay file not found: {selected.value}")
        return path

    def _composite(
        self,
        base: Asset,
        overlay_path: Path,
        scaled: Asset,
        final: Asset,
        params: RenderParameters,
        target: TargetSize,
    ) -> None:
        # Overlay size and offset are fractions of the target size, per axis
        width, height = params.placement.size_for(target)
        dx, dy = params.placement.offset_for(target)
        self.executor.run(overlay_path, [Resize(width, height)], scaled.path)
        self.executor.run(base.path, [CompositeOver(scaled.path, dx, dy, gravity=NORTH)], final.path)
