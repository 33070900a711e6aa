"""Office Data Connection (.odc) writer and reader.

The connection file is an HTML document. Its ``msodc`` XML island holds the
Power Query "Mashup" XML, HTML-escaped a second time, and the query program
sits in a CDATA section inside that Mashup.
"""

import re

from postman_odc.config import (
    DEFAULT_EXTENSION,
    MASHUP_CLIENT,
    MASHUP_CULTURE,
    MASHUP_MIN_VERSION,
    MASHUP_VERSION,
)

UNSAFE_NAME_RE = re.compile(r'[\\/:*?"<>|]')

HTML_ENTITIES = [("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"), ('"', "&quot;")]

NEWLINE_TOKEN = "&#13;&#10;"

MASHUP_TEMPLATE = (
    '<Mashup xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xmlns:xsd="http://www.w3.org/2001/XMLSchema" '
    'xmlns="http://schemas.microsoft.com/DataMashup">'
    "<Client>{client}</Client>"
    "<Version>{version}</Version>"
    "<MinVersion>{min_version}</MinVersion>"
    "<Culture>{culture}</Culture>"
    "<SafeCombine>true</SafeCombine>"
    "<Items>"
    '<Query Name="{name}">'
    "<Formula><![CDATA[{formula}]]></Formula>"
    '<IsParameterQuery xsi:nil="true" />'
    '<IsDirectQuery xsi:nil="true" />'
    "</Query>"
    "</Items>"
    "</Mashup>"
)

ODC_TEMPLATE = """<html xmlns:o="urn:schemas-microsoft-com:office:office"
xmlns="http://www.w3.org/TR/REC-html40">

<head>
<meta http-equiv=Content-Type content="text/x-ms-odc; charset=utf-8">
<meta name=ProgId content=ODC.Database>
<meta name=SourceType content=OLEDB>
<title>Query - {title}</title>
<xml id=docprops><o:DocumentProperties
  xmlns:o="urn:schemas-microsoft-com:office:office"
  xmlns="http://www.w3.org/TR/REC-html40">
  <o:Description>{description}</o:Description>
  <o:Name>Query - {title}</o:Name>
 </o:DocumentProperties>
</xml><xml id=msodc><odc:OfficeDataConnection
  xmlns:odc="urn:schemas-microsoft-com:office:odc"
  xmlns="http://www.w3.org/TR/REC-html40">
  <odc:PowerQueryConnection odc:Type="OLEDB">
   <odc:ConnectionString>Provider=Microsoft.Mashup.OleDb.1;Data Source=$Workbook$;Location=&quot;{location}&quot;;Extended Properties=&quot;&quot;</odc:ConnectionString>
   <odc:CommandType>SQL</odc:CommandType>
   <odc:CommandText>SELECT * FROM [{command_name}]</odc:CommandText>
  </odc:PowerQueryConnection>
  <odc:PowerQueryMashupData>{mashup}</odc:PowerQueryMashupData>
 </odc:OfficeDataConnection>
</xml>
<style>
<!--
    .ODCDataSource
    {{
    behavior: url(dataconn.htc);
    }}
-->
</style>

</head>

<body scroll=no leftmargin=0 topmargin=0 rightmargin=0 bottommargin=0 style='border: 0px'>
<div id='pt' style='height: 100%' class='ODCDataSource'></div>
</body>

</html>
"""

MASHUP_DATA_RE = re.compile(r"<odc:PowerQueryMashupData>(.*?)</odc:PowerQueryMashupData>", re.DOTALL)
FORMULA_RE = re.compile(r"<Formula><!\[CDATA\[(.*)\]\]></Formula>", re.DOTALL)


def sanitize_name(name: str) -> str:
    """Replace characters that are unsafe in file names and query names."""
    return UNSAFE_NAME_RE.sub("_", name)


def escape_html(text: str) -> str:
    # Ampersand first, or the entities added afterwards would be escaped again.
    for char, entity in HTML_ENTITIES:
        text = text.replace(char, entity)
    return text


def unescape_html(text: str) -> str:
    for char, entity in reversed(HTML_ENTITIES):
        text = text.replace(entity, char)
    return text


def encode_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\n", NEWLINE_TOKEN)


def escape_program(program: str) -> str:
    """Escape a query program for embedding in the connection file."""
    return encode_newlines(escape_html(program))


def _cdata_safe(text: str) -> str:
    return text.replace("]]>", "]]]]><![CDATA[>")


def serialize(query_name: str, description: str, program: str) -> str:
    """Build the complete connection file embedding the program."""
    name = sanitize_name(query_name)
    mashup = MASHUP_TEMPLATE.format(
        client=MASHUP_CLIENT,
        version=MASHUP_VERSION,
        min_version=MASHUP_MIN_VERSION,
        culture=MASHUP_CULTURE,
        name=escape_html(name),
        formula=_cdata_safe(program),
    )
    return ODC_TEMPLATE.format(
        title=escape_html(name),
        description=escape_html(description),
        location=escape_html(name),
        command_name=escape_html(name.replace("]", "]]")),
        mashup=escape_program(mashup),
    )


def output_filename(query_name: str, extension: str = DEFAULT_EXTENSION) -> str:
    return f"Query - {sanitize_name(query_name)}.{extension}"


def extract_program(content: str) -> str:
    """Read the query program back out of a connection file."""
    data = MASHUP_DATA_RE.search(content)
    if not data:
        raise ValueError("No PowerQueryMashupData found in the connection file.")
    mashup = unescape_html(data.group(1).replace(NEWLINE_TOKEN, "\n"))
    formula = FORMULA_RE.search(mashup)
    if not formula:
        raise ValueError("No query formula found in the connection file.")
    return formula.group(1).replace("]]><![CDATA[", "")
