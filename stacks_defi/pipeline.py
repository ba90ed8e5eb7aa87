# pipeline.py
# Entry point: fetch from every source -> dedupe by name -> normalize -> score.

import logging
from collections import Counter
from typing import List, Optional, Sequence

from . import config
from .aggregate import SourceAdapter, collect, dedupe
from .chain import ReadOnlyClient, StacksReadOnlyClient
from .fetch_llama import DefiLlamaAdapter
from .fetch_onchain import OwnPoolsAdapter
from .fetch_protocols import ProtocolStatsAdapter
from .fetch_tokens import TokenListAdapter
from .models import ProtocolRecord, UserPosition
from .normalize import normalize
from .risk_score import score

logger = logging.getLogger(__name__)


class ProtocolPipeline:
    """
    Builds the adapters once from a PipelineConfig. Every run() re-fetches
    everything; nothing is cached between runs.
    """

    def __init__(self, cfg: Optional[config.PipelineConfig] = None, session=None,
                 chain_client: Optional[ReadOnlyClient] = None,
                 adapters: Optional[Sequence[SourceAdapter]] = None):
        self.cfg = cfg or config.PipelineConfig()
        self.session = session
        self.chain_client = chain_client or StacksReadOnlyClient(
            self.cfg.stacks_api_url,
            sender=self.cfg.contract_address,
            timeout=self.cfg.chain_read_timeout,
            session=session,
        )
        self.own_pools = OwnPoolsAdapter(self.cfg, self.chain_client)
        if adapters is None:
            adapters = self.default_adapters()
        self.adapters = list(adapters)

    def default_adapters(self) -> List[SourceAdapter]:
        # Order matters: on a name clash the earlier source wins.
        return [
            self.own_pools,
            *[ProtocolStatsAdapter(src, self.cfg, self.session) for src in self.cfg.protocol_sources],
            DefiLlamaAdapter(self.cfg, self.session),
            TokenListAdapter(self.cfg, self.session),
        ]

    def run(self) -> List[ProtocolRecord]:
        """
        Always returns a list. A source being down only means fewer records;
        anything unexpected past that yields an empty list.
        """
        try:
            raw = collect(self.adapters)
            unique = dedupe(raw)

            protocols = []
            for rec in unique:
                p = normalize(rec)
                p.risk_analysis = score(p)
                protocols.append(p)
        except Exception:
            logger.exception("Error fetching protocols")
            return []

        logger.info("Total protocols fetched: %d", len(protocols))
        logger.info("Protocol sources: %s", [f"{p.name} ({p.source})" for p in protocols])
        logger.info("Risk distribution: %s",
                    dict(Counter(p.risk_analysis.category for p in protocols)))
        return protocols

    def fetch_user_positions(self, wallet_address: str) -> List[UserPosition]:
        return self.own_pools.fetch_user_positions(wallet_address)


def fetch_all_protocols(cfg: Optional[config.PipelineConfig] = None, session=None) -> List[ProtocolRecord]:
    return ProtocolPipeline(cfg, session=session).run()
