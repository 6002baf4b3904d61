from .layer_thickness import LayerThicknessVariable, ThicknessParameters

__all__ = ["LayerThicknessVariable", "ThicknessParameters"]
