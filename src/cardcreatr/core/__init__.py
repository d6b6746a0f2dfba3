"""Card Creatr core: option resolution, assets, layout, bundles and rendering."""
