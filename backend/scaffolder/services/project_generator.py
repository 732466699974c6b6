import json
import logging
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


PROJECT_TYPE_KEYWORDS = {
    "company-profile": ["company", "corp", "business", "profile", "agency"],
    "landing-page": ["landing", "promo", "marketing", "launch"],
    "ecommerce": ["shop", "store", "market", "ecommerce", "commerce"],
}

PROJECT_FEATURES = {
    "company-profile": ["hero", "about", "services", "contact"],
    "landing-page": ["hero", "features", "call-to-action"],
    "ecommerce": ["product-grid", "cart"],
    "basic": ["welcome"],
}

SECTION_TITLES = {
    "hero": "Welcome",
    "about": "About Us",
    "services": "Our Services",
    "contact": "Contact",
    "features": "Features",
    "call-to-action": "Get Started",
    "product-grid": "Products",
    "cart": "Your Cart",
}


def package_name(project_name: str) -> str:
    """npm package name for a project"""
    return "-".join(project_name.lower().split())


class ProjectGenerator:
    """Writes the files of a vanilla frontend project"""

    def analyze_project_type(self, project_name: str) -> Dict[str, Any]:
        """Pick a project type from keywords in the project name"""
        name_lower = project_name.lower()

        project_type = "basic"
        for candidate, keywords in PROJECT_TYPE_KEYWORDS.items():
            if any(keyword in name_lower for keyword in keywords):
                project_type = candidate
                break

        additional_dependencies: Dict[str, str] = {}
        if project_type == "ecommerce":
            additional_dependencies["uuid"] = "^9.0.0"

        return {
            "type": project_type,
            "features": PROJECT_FEATURES[project_type],
            "additionalDependencies": additional_dependencies
        }

    def generate_vanilla_files(self, project_path: Path, project_name: str, port: int) -> List[Path]:
        """Write index.html, styles.css, app.js, server.js and package.json"""
        project_path = Path(project_path)
        analysis = self.analyze_project_type(project_name)

        files = {
            "index.html": self._index_html(project_name, port, analysis["features"]),
            "styles.css": STYLES_CSS,
            "app.js": f"console.log('Hello from {project_name}! The app is running.');\n",
            "server.js": SERVER_JS.replace("__PORT__", str(port)),
            "package.json": json.dumps(self._package_json(project_name, analysis), indent=2) + "\n",
        }

        written = []
        for filename, content in files.items():
            path = project_path / filename
            path.write_text(content, encoding="utf-8")
            written.append(path)

        logger.info(f"Generated {len(written)} files for '{project_name}' ({analysis['type']})")
        return written

    def _index_html(self, project_name: str, port: int, features: List[str]) -> str:
        sections = "\n".join(
            f'    <section id="{feature}"><h2>{SECTION_TITLES[feature]}</h2></section>'
            for feature in features
            if feature in SECTION_TITLES
        )
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{project_name}</title>
    <link rel="stylesheet" href="styles.css">
</head>
<body>
    <h1>Welcome to {project_name}!</h1>
    <p>Your development server is running on port {port}.</p>
{sections}
    <script src="app.js"></script>
</body>
</html>
"""

    def _package_json(self, project_name: str, analysis: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": package_name(project_name),
            "version": "1.0.0",
            "description": f"A {analysis['type']} frontend project named {project_name}",
            "main": "server.js",
            "scripts": {
                "start": "node server.js"
            },
            "author": "",
            "license": "ISC",
            "dependencies": dict(analysis["additionalDependencies"])
        }


STYLES_CSS = """body {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
  display: flex;
  flex-direction: column;
  align-items: center;
  margin: 0;
  background-color: #282c34;
  color: white;
  text-align: center;
}

h1 {
  color: #61dafb;
  font-size: 2.5rem;
}
"""

SERVER_JS = """const http = require('http');
const fs = require('fs');
const path = require('path');

const PORT = process.env.PORT || __PORT__;
const CONTENT_TYPES = { '.js': 'text/javascript', '.css': 'text/css' };

const server = http.createServer((req, res) => {
    const filePath = path.join(__dirname, req.url === '/' ? 'index.html' : req.url);
    const contentType = CONTENT_TYPES[path.extname(filePath)] || 'text/html';

    fs.readFile(filePath, (err, content) => {
        if (err) {
            res.writeHead(err.code === 'ENOENT' ? 404 : 500, { 'Content-Type': 'text/html' });
            res.end(err.code === 'ENOENT' ? '<h1>404 Not Found</h1>' : 'Server Error: ' + err.code);
            return;
        }
        res.writeHead(200, { 'Content-Type': contentType });
        res.end(content, 'utf-8');
    });
});

server.on('error', (err) => {
    console.error(err.code === 'EADDRINUSE' ? `Error: listen EADDRINUSE: address already in use :::${PORT}` : err.message);
    process.exit(1);
});

server.listen(PORT, () => {
    console.log(`Server is running successfully at http://localhost:${PORT}`);
});
"""


# Global instance
project_generator = ProjectGenerator()
