"""Tour Campaign Optimizer.

Campaign optimization for a Kyoto tour operator: booking value, audience,
seasonal and bid analysis, with a cached tour catalogue and an MCP server.
"""

__version__ = "1.0.0"

from tour_campaign_optimizer.optimizer import CampaignOptimizer
from tour_campaign_optimizer.server import create_mcp_server

__all__ = ["CampaignOptimizer", "create_mcp_server"]
