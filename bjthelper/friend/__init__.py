"""Friend system: messages, per-user friend lists and the message manager."""