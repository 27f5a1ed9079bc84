"""Sphinx configuration for maparray documentation."""

from importlib.metadata import version as get_version

# -- Project information -----------------------------------------------------
project = 'maparray'
copyright = '2026, maparray contributors'
author = 'maparray contributors'
release = get_version('maparray')

# -- General configuration ---------------------------------------------------
extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

# -- Options for HTML output -------------------------------------------------
html_theme = 'sphinx_rtd_theme'

# -- Autodoc configuration ---------------------------------------------------
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'undoc-members': True,
    'exclude-members': '__weakref__, __init__, __new__',
}
