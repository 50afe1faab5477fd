from .ssl_transport import SSLTransport as SSLTransport
from .tcp_transport import TCPTransport as TCPTransport
from .transport import Transport as Transport
