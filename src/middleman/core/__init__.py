# This directory contains the relay logic:
# - Envelope sealing and opening (AES-256-GCM)
# - Forwarding decrypted requests to the backend
# - Per-request orchestration, independent of the HTTP framework
