"""Core building blocks shared by the render pipeline and the URL state layer."""
