"""
BOSH deployments Prometheus exporter
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Exports BOSH deployment metrics in Prometheus format.
:copyright: © 2026 The boshmetrics Authors.
:license: Apache 2.0, see LICENSE for more details.
"""

__title__ = "boshmetrics"
__description__ = "Exports BOSH deployment metrics in Prometheus format."
__author__ = "The boshmetrics Authors"
__license__ = "Apache 2.0"
__copyright__ = "Copyright © 2026 The boshmetrics Authors"
__version__ = "0.1.0"
