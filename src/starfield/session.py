"""One-shot session startup: settings → catalog → index → overlay controller."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from starfield.catalog import CatalogLoader, CatalogLoadResult
from starfield.config import Settings
from starfield.constellations import DEFAULT_CONSTELLATIONS, ConstellationRegistry
from starfield.errors import CatalogError
from starfield.index import StarCatalogIndex
from starfield.models import Constellation
from starfield.overlay import OverlayController, Renderer

logger = logging.getLogger(__name__)


@dataclass
class SkySession:
    """A loaded catalog with its overlay, ready for toggle events."""

    settings: Settings
    catalog: StarCatalogIndex
    controller: OverlayController
    load_result: CatalogLoadResult | None  # None when loading failed outright
    load_error: CatalogError | None = None

    @classmethod
    def open(
        cls,
        settings: Settings,
        renderer: Renderer,
        constellations: Iterable[Constellation] = DEFAULT_CONSTELLATIONS,
    ) -> "SkySession":
        """Load the configured catalog and place every star through the renderer.

        An unreadable file or a malformed catalog envelope is logged and the
        session continues with an empty catalog; ``load_error`` records why.

        Args:
            settings: Catalog location, format, and display parameters.
            renderer: Rendering collaborator that receives star and line visuals.
            constellations: Overlay table. Defaults to the built-in constellations.

        Returns:
            SkySession with stars already placed.
        """
        loader = CatalogLoader(settings.format)
        result: CatalogLoadResult | None = None
        error: CatalogError | None = None
        try:
            result = loader.load_path(settings.catalog_path)
            catalog = StarCatalogIndex(result.stars)
        except CatalogError as e:
            logger.error("Catalog load failed, continuing with an empty catalog: %s", e)
            error = e
            catalog = StarCatalogIndex.empty()

        controller = OverlayController(
            catalog,
            ConstellationRegistry(constellations),
            renderer,
            line_inset=settings.line_inset,
            size_min=settings.star_size_min,
            size_max=settings.star_size_max,
        )
        controller.place_stars()
        return cls(
            settings=settings,
            catalog=catalog,
            controller=controller,
            load_result=result,
            load_error=error,
        )
