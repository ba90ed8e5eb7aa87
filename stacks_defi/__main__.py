# __main__.py
# python -m stacks_defi [--log-level DEBUG] [--wallet SP...]
# Dumps the scored protocol list (or a wallet's positions) as JSON.

import argparse
import json

from .config import PipelineConfig
from .log import setup_logging
from .pipeline import ProtocolPipeline


def main(argv=None):
    parser = argparse.ArgumentParser(description="Fetch, normalize and risk-score Stacks DeFi protocols.")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--wallet", help="show this wallet's staking positions instead")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    pipeline = ProtocolPipeline(PipelineConfig.from_env())

    if args.wallet:
        out = [p.to_dict() for p in pipeline.fetch_user_positions(args.wallet)]
    else:
        out = [p.to_dict() for p in pipeline.run()]
    print(json.dumps(out, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
