from comms.channel import (
    EOF,
    ChannelError,
    DelayedChannel,
    DestinationTooSmall,
    NoDelaysConfigured,
    ReadCancelled,
)
