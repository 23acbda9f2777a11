"""Exception types raised by the bead renderer."""


class MarbleFusionError(Exception):
    """Base class for all MarbleFusion errors."""


class InvalidPalette(MarbleFusionError, ValueError):
    """The palette cannot produce a gradient (too few stops, bad weights)."""


class InvalidParameter(MarbleFusionError, ValueError):
    """A fusion parameter or canvas dimension is unusable."""


class RecipeGenerationFailure(MarbleFusionError):
    """A recipe from the stylist service could not be used."""


class RenderCancelled(MarbleFusionError):
    """A frame was superseded by a newer render before it finished."""
