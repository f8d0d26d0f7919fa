import sys

from dynamo_stream_subscriber.cli import main

sys.exit(main())
