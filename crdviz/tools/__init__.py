from crdviz.tools.crd_browser import register_crd_browser_tools

__all__ = ["register_crd_browser_tools"]
