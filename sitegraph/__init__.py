"""SiteGraph: website crawl, link graph and schema.org analysis."""
